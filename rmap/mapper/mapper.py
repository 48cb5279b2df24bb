from __future__ import annotations
from typing import Optional, Tuple
import logging

import rmap.common.data_structs as rm_ds
import rmap.common.utils as rm_utils
import rmap.common.constants as consts
import rmap.mapper.realize as realize


def choose_mapping_for_memory(
    circuit_id: int,
    mem: rm_ds.LogicalMemory,
    group_id: int,
    arch: rm_ds.ArchParams,
) -> rm_ds.RamMapping:
    """
        Picks the cheapest implementation of a logical RAM across all enabled physical RAM types

        Types are evaluated in `rm_ds.PHYS_TYPE_ORDER` and a later type only replaces the current best
        if it is strictly cheaper.

        Args:
            circuit_id: id of the circuit `mem` belongs to
            mem: logical RAM being mapped
            group_id: group id given to the mapping
            arch: memory architecture

        Returns:
            The chosen mapping

        Raises:
            UnmappableMemoryError: if no enabled physical RAM type can implement `mem`
    """
    logger = logging.getLogger(consts.LOGGER_NAME)
    best: Optional[Tuple[rm_ds.RamMapping, float]] = None
    for cfg in arch.enabled_configs():
        candidate = realize.best_mapping_for_phys_type(circuit_id, mem, group_id, cfg)
        if candidate is not None and (best is None or candidate[1] < best[1]):
            best = candidate

    if best is None:
        raise rm_ds.UnmappableMemoryError(
            f"ERROR: No legal mapping for logical RAM {mem.ram_id} in circuit {circuit_id} under current memory config"
        )
    mapping, mapping_cost = best
    logger.debug(
        f"{rm_utils.log_format_list('map', f'circuit {circuit_id}', f'ram {mem.ram_id}')} "
        f"{mem.mode.value} {mem.width}x{mem.depth} -> {mapping.phys_type.name} "
        f"W {mapping.phys_width} D {mapping.phys_depth} S {mapping.series} P {mapping.parallel} cost {mapping_cost:.4e}"
    )
    return mapping
