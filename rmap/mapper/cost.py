from __future__ import annotations
import math

import rmap.common.data_structs as rm_ds
import rmap.common.constants as consts


def block_ram_area(bits: int, max_width: int) -> float:
    """
        Area of a single block RAM macro in MWTAs

        Args:
            bits: total bit capacity of the block RAM
            max_width: max data width of the block RAM (in the mode it is used in)

        Returns:
            area of the block RAM, increases monotonically with both bits and max_width
    """
    return (
        consts.BRAM_BASE_AREA
        + consts.BRAM_AREA_PER_BIT * bits
        + consts.BRAM_AREA_PER_SQRT_BIT * math.sqrt(bits)
        + consts.BRAM_AREA_PER_PORT_BIT * consts.BRAM_PORTS * max_width
    )


def decoder_luts(series: int) -> int:
    """ LUTs needed to decode the address MSBs into write enables for `series` RAMs chained in depth """
    if series <= 1:
        return 0
    elif series == 2:
        # single LUT drives the enable and its inverse
        return 1
    return series


def mux_luts(series: int, width: int) -> int:
    """
        LUTs of the output mux selecting between `series` chained RAMs, for each of the `width` output bits

        Each output bit is muxed by a tree of 4:1 muxes (one LUT each)
    """
    if series <= 1:
        return 0
    luts_per_bit = 0
    current_count = series
    while current_count > 1:
        current_count = math.ceil(current_count / consts.MUX_TREE_FANIN)
        luts_per_bit += current_count
    return luts_per_bit * width


def luts_to_lbs(luts: int) -> int:
    return math.ceil(luts / consts.LUTS_PER_LB)


def utilization(mapping: rm_ds.RamMapping, cfg: rm_ds.PhysConfig) -> float:
    """ Fraction of the physical bits used by the logical RAM clamped to [0, 1] """
    phys_bits = mapping.phys_blocks * cfg.bits
    if phys_bits <= 0:
        return 1.0
    return min(max(mapping.logical_bits / phys_bits, 0.0), 1.0)


def penalty_strength(phys_type: rm_ds.PhysType) -> float:
    strengths = {
        rm_ds.PhysType.LUTRAM: consts.LUTRAM_PENALTY,
        rm_ds.PhysType.RAM_8K: consts.RAM_8K_PENALTY,
        rm_ds.PhysType.RAM_128K: consts.RAM_128K_PENALTY,
    }
    return strengths[phys_type]


def mapping_cost(mapping: rm_ds.RamMapping, cfg: rm_ds.PhysConfig) -> float:
    """
        Scores a candidate mapping, lower is better

        The base area is the area of the physical RAMs plus the logic blocks holding the extra LUTs,
        it is scaled up by a penalty which grows as the physical bits are less utilized.
        Larger RAM types are penalized more strongly for wasted bits.

        Args:
            mapping: candidate mapping to score
            cfg: config of the physical RAM type the mapping uses

        Returns:
            cost of the mapping
    """
    extra_lbs = luts_to_lbs(mapping.extra_luts)
    if cfg.phys_type == rm_ds.PhysType.LUTRAM:
        base_area = (mapping.phys_blocks + extra_lbs) * consts.AVG_LB_AREA
    else:
        base_area = (
            extra_lbs * consts.AVG_LB_AREA
            + mapping.phys_blocks * block_ram_area(cfg.bits, cfg.max_width(mapping.mode))
        )
    util = utilization(mapping, cfg)
    penalty = 10.0 + penalty_strength(cfg.phys_type) * (10.0 - util)
    return base_area * penalty
