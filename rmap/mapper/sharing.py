from __future__ import annotations
from typing import List
import logging

import rmap.common.data_structs as rm_ds
import rmap.common.utils as rm_utils
import rmap.common.constants as consts


def is_share_candidate(mapping: rm_ds.RamMapping, cfg: rm_ds.PhysConfig) -> bool:
    """
        Checks if a mapping can be packed with another into a single physical RAM running in true dual port mode

        The mapping must fit in one physical RAM, only use a single port, be narrow enough for true dual port mode
        and leave some of the physical bits unused.
    """
    if mapping.phys_type != cfg.phys_type:
        return False
    if mapping.mode not in (rm_ds.MemMode.ROM, rm_ds.MemMode.SINGLE_PORT):
        return False
    if mapping.phys_blocks != 1:
        return False
    if cfg.max_width_tdp > 0 and mapping.phys_width > cfg.max_width_tdp:
        return False
    return 0 < mapping.logical_bits < cfg.bits


def can_pair(first: rm_ds.RamMapping, second: rm_ds.RamMapping, cfg: rm_ds.PhysConfig) -> bool:
    if first.circuit_id != second.circuit_id:
        return False
    # Identical physical shapes only
    if (first.phys_width, first.phys_depth, first.series, first.parallel) != (second.phys_width, second.phys_depth, second.series, second.parallel):
        return False
    if first.logical_depth + second.logical_depth > first.phys_depth * first.series:
        return False
    return first.logical_bits + second.logical_bits == cfg.bits


def share_type(mappings: List[rm_ds.RamMapping], cfg: rm_ds.PhysConfig, total_blocks: int) -> int:
    """
        Greedily pairs compatible mappings of one physical RAM type, each pair gives back one physical RAM

        Candidates are visited in list order, each is paired with the first later unpaired candidate it is compatible with.
        Paired mappings are switched to true dual port mode and the second takes the group id of the first.

        Args:
            mappings: all mappings of the run, modified in place
            cfg: physical RAM type being shared
            total_blocks: number of physical RAMs of this type used before sharing

        Returns:
            number of physical RAMs of this type used after sharing
    """
    logger = logging.getLogger(consts.LOGGER_NAME)
    candidates: List[rm_ds.RamMapping] = [mapping for mapping in mappings if is_share_candidate(mapping, cfg)]
    shared = [False] * len(candidates)
    for i, first in enumerate(candidates):
        if shared[i]:
            continue
        for j in range(i + 1, len(candidates)):
            if shared[j]:
                continue
            second = candidates[j]
            if not can_pair(first, second, cfg):
                continue
            shared[i] = shared[j] = True
            first.mode = rm_ds.MemMode.TRUE_DUAL_PORT
            second.mode = rm_ds.MemMode.TRUE_DUAL_PORT
            second.group_id = first.group_id
            total_blocks -= 1
            logger.debug(
                f"{rm_utils.log_format_list('share', cfg.phys_type.name, f'circuit {first.circuit_id}')} "
                f"ram {first.logical_ram_id} + ram {second.logical_ram_id} -> group {first.group_id}"
            )
            break
    return total_blocks


def apply_sharing(
    mappings: List[rm_ds.RamMapping],
    arch: rm_ds.ArchParams,
    result: rm_ds.MappingResult,
) -> None:
    """ Runs sharing on the 8K then 128K block RAMs (when enabled) and updates the block totals of `result` """
    if arch.has_m8k:
        result.m8k_blocks = share_type(mappings, arch.m8k_config(), result.m8k_blocks)
    if arch.has_m128k:
        result.m128k_blocks = share_type(mappings, arch.m128k_config(), result.m128k_blocks)
