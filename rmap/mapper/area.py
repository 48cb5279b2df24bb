from __future__ import annotations
from dataclasses import dataclass
from typing import List, Dict, Set, Tuple
import math

import numpy as np

import rmap.common.data_structs as rm_ds
import rmap.common.constants as consts
import rmap.mapper.cost as cost


@dataclass
class ResourceUsage:
    """ Resources used by a circuit (or a whole design) which drive the size of the FPGA it needs """
    logic_blocks: int = 0
    extra_luts: int = 0
    lutram_blocks: int = 0
    m8k_blocks: int = 0
    m128k_blocks: int = 0

    def add_blocks(self, phys_type: rm_ds.PhysType, num_blocks: int) -> None:
        if phys_type == rm_ds.PhysType.LUTRAM:
            self.lutram_blocks += num_blocks
        elif phys_type == rm_ds.PhysType.RAM_8K:
            self.m8k_blocks += num_blocks
        elif phys_type == rm_ds.PhysType.RAM_128K:
            self.m128k_blocks += num_blocks


@dataclass
class AreaBreakdown:
    """
        Area of the smallest FPGA of the given architecture which fits a resource usage

        Attributes:
            regular_lbs: logic blocks used for logic, including LUTs added by RAM mapping
            required_lb_tiles: logic block tiles in the chip
            avail_m8k: 8K RAMs in the chip
            avail_m128k: 128K RAMs in the chip
            total_area: area in MWTAs
    """
    regular_lbs: int
    required_lb_tiles: int
    avail_m8k: int
    avail_m128k: int
    total_area: float


def fpga_area(usage: ResourceUsage, arch: rm_ds.ArchParams) -> AreaBreakdown:
    """
        Sizes an FPGA for a resource usage and returns its area

        The chip is grown in logic block tiles until it holds enough logic, LUTRAM capable LBs and block RAM sites,
        the block RAM columns are spaced at a fixed ratio of LBs so the number of block RAMs follows the LB count.

        Args:
            usage: resources required
            arch: memory architecture of the chip

        Returns:
            tile counts and total area of the chip
    """
    regular_lbs = usage.logic_blocks + math.ceil(usage.extra_luts / consts.LUTS_PER_LB)
    nlb = regular_lbs + usage.lutram_blocks

    if arch.has_m8k and usage.m8k_blocks > 0 and arch.lbs_per_m8k > 0:
        nlb = max(nlb, usage.m8k_blocks * arch.lbs_per_m8k)
    if arch.has_m128k and usage.m128k_blocks > 0 and arch.lbs_per_m128k > 0:
        nlb = max(nlb, usage.m128k_blocks * arch.lbs_per_m128k)
    # Only a fraction of LBs can act as LUTRAM
    if arch.has_lutram and arch.lutram_fraction > 0.0:
        nlb = max(nlb, math.ceil(usage.lutram_blocks / arch.lutram_fraction))

    avail_m8k = nlb // arch.lbs_per_m8k if arch.has_m8k and arch.lbs_per_m8k > 0 else 0
    avail_m128k = nlb // arch.lbs_per_m128k if arch.has_m128k and arch.lbs_per_m128k > 0 else 0

    total_area = (
        nlb * consts.AVG_LB_AREA
        + avail_m8k * cost.block_ram_area(arch.m8k_bits, arch.m8k_max_width)
        + avail_m128k * cost.block_ram_area(arch.m128k_bits, arch.m128k_max_width)
    )
    return AreaBreakdown(
        regular_lbs = regular_lbs,
        required_lb_tiles = nlb,
        avail_m8k = avail_m8k,
        avail_m128k = avail_m128k,
        total_area = total_area,
    )


def tally_usage(circuits: List[rm_ds.Circuit], mappings: List[rm_ds.RamMapping]) -> Dict[int, ResourceUsage]:
    """
        Per circuit resource usage, keyed by circuit id

        Mappings packed into the same physical RAMs share a group id, thier blocks are only counted once.
    """
    usage: Dict[int, ResourceUsage] = {
        circuit.id: ResourceUsage(logic_blocks = circuit.logic_blocks) for circuit in circuits
    }
    counted_groups: Set[Tuple[int, rm_ds.PhysType]] = set()
    for mapping in mappings:
        circuit_usage = usage.setdefault(mapping.circuit_id, ResourceUsage())
        circuit_usage.extra_luts += mapping.extra_luts
        if (mapping.group_id, mapping.phys_type) in counted_groups:
            continue
        counted_groups.add((mapping.group_id, mapping.phys_type))
        circuit_usage.add_blocks(mapping.phys_type, mapping.phys_blocks)
    return usage


def design_usage(circuits: List[rm_ds.Circuit], result: rm_ds.MappingResult) -> ResourceUsage:
    return ResourceUsage(
        logic_blocks = sum(circuit.logic_blocks for circuit in circuits),
        extra_luts = result.extra_luts,
        lutram_blocks = result.lutram_blocks,
        m8k_blocks = result.m8k_blocks,
        m128k_blocks = result.m128k_blocks,
    )


def compute_total_area(circuits: List[rm_ds.Circuit], result: rm_ds.MappingResult, arch: rm_ds.ArchParams) -> float:
    """ Area of a single FPGA holding every circuit at once """
    return fpga_area(design_usage(circuits, result), arch).total_area


def geometric_mean_area(circuit_areas: List[float]) -> float:
    """
        Geometric mean of per circuit areas

        Areas are scaled down before taking logs to keep values in a comfortable range.
        Returns 0.0 for an empty list or if any area is 0.
    """
    if len(circuit_areas) == 0:
        return 0.0
    areas = np.asarray(circuit_areas, dtype = float) / consts.GEOMEAN_SCALE
    if np.any(areas <= 0.0):
        return 0.0
    return float(np.exp(np.mean(np.log(areas))) * consts.GEOMEAN_SCALE)
