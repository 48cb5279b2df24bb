# Logger shared by all RAM-Map modules
LOGGER_NAME = "ram_map_root"

# Verbosity levels
BRIEF = 0
INFO = 1
DEBUG = 2

# Average logic block tile area, mix of LBs with and without LUTRAM support (MWTAs)
AVG_LB_AREA = (35000.0 + 40000.0) / 2.0

# Number of LUTs packed into a single logic block
LUTS_PER_LB = 10

# Max number of physical RAMs which can be chained in depth
MAX_SERIES = 16

# Fanin of the LUT based mux tree used to stitch series RAMs
MUX_TREE_FANIN = 4

# LUTRAM geometry, a LB in LUTRAM mode supports 64x10 or 32x20
LUTRAM_BITS = 64 * 10
LUTRAM_SHAPES = {
    10: 64,
    20: 32,
}

# Utilization penalty strength per physical RAM type, larger resources are penalized harder
LUTRAM_PENALTY = 1.6
RAM_8K_PENALTY = 2.2
RAM_128K_PENALTY = 5.0

# Block RAM macro area model coefficients
BRAM_BASE_AREA = 9000.0
BRAM_AREA_PER_BIT = 5.0
BRAM_AREA_PER_SQRT_BIT = 90.0
BRAM_AREA_PER_PORT_BIT = 600.0
BRAM_PORTS = 2

# Scale used to keep the geometric mean product in a sane floating point range
GEOMEAN_SCALE = 1.0e7

# Default output file names
RESULTS_FNAME = "results.csv"
MAPPING_FNAME = "ram_mapped.txt"
