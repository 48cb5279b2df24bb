from __future__ import annotations
from typing import List, Tuple, Optional
import math

import rmap.common.data_structs as rm_ds
import rmap.common.constants as consts
import rmap.mapper.cost as cost


def candidate_shapes(cfg: rm_ds.PhysConfig, mode: rm_ds.MemMode) -> List[Tuple[int, int]]:
    """
        Legal (width, depth) configurations of a physical RAM in a given mode

        Args:
            cfg: physical RAM config
            mode: mode the logical RAM is accessed in

        Returns:
            list of (width, depth) tuples in increasing width order, empty if the mode is unsupported
    """
    max_width = cfg.max_width(mode)
    if max_width <= 0:
        return []
    if cfg.phys_type == rm_ds.PhysType.LUTRAM:
        return [(width, depth) for width, depth in sorted(consts.LUTRAM_SHAPES.items()) if width <= max_width]
    shapes = []
    width = 1
    while width <= max_width:
        if cfg.bits % width == 0:
            shapes.append((width, cfg.bits // width))
        width *= 2
    return shapes


def build_mapping(
    circuit_id: int,
    mem: rm_ds.LogicalMemory,
    group_id: int,
    cfg: rm_ds.PhysConfig,
    phys_width: int,
    phys_depth: int,
) -> Optional[rm_ds.RamMapping]:
    """
        Builds the mapping of `mem` onto an array of `cfg` RAMs configured as `phys_width` x `phys_depth`

        Returns:
            The mapping or None if the array would exceed the max RAMs chained in series
    """
    parallel = math.ceil(mem.width / phys_width)
    series = math.ceil(mem.depth / phys_depth)
    if parallel <= 0 or series <= 0 or series > consts.MAX_SERIES:
        return None
    extra_luts = cost.decoder_luts(series) + cost.mux_luts(series, mem.width)
    # Both ports need their own decode and output mux
    if series > 1 and mem.mode == rm_ds.MemMode.TRUE_DUAL_PORT:
        extra_luts *= 2
    return rm_ds.RamMapping(
        circuit_id = circuit_id,
        logical_ram_id = mem.ram_id,
        extra_luts = extra_luts,
        logical_width = mem.width,
        logical_depth = mem.depth,
        group_id = group_id,
        series = series,
        parallel = parallel,
        phys_type = cfg.phys_type,
        mode = mem.mode,
        phys_width = phys_width,
        phys_depth = phys_depth,
        phys_blocks = series * parallel,
    )


def best_mapping_for_phys_type(
    circuit_id: int,
    mem: rm_ds.LogicalMemory,
    group_id: int,
    cfg: rm_ds.PhysConfig,
) -> Optional[Tuple[rm_ds.RamMapping, float]]:
    """
        Enumerates every legal configuration of a physical RAM type for a logical RAM and keeps the cheapest

        Args:
            circuit_id: id of the circuit `mem` belongs to
            mem: logical RAM being mapped
            group_id: group id assigned to the resulting mapping
            cfg: physical RAM type being evaluated

        Returns:
            (mapping, cost) of the cheapest candidate, on a cost tie the narrowest width wins.
            None if the physical RAM type cannot implement `mem`
    """
    if mem.mode == rm_ds.MemMode.TRUE_DUAL_PORT and cfg.max_width_tdp == 0:
        return None
    best: Optional[Tuple[rm_ds.RamMapping, float]] = None
    for phys_width, phys_depth in candidate_shapes(cfg, mem.mode):
        mapping = build_mapping(circuit_id, mem, group_id, cfg, phys_width, phys_depth)
        if mapping is None:
            continue
        mapping_cost = cost.mapping_cost(mapping, cfg)
        if best is None or mapping_cost < best[1]:
            best = (mapping, mapping_cost)
    return best
