from __future__ import annotations
from typing import List
import logging

import rmap.common.data_structs as rm_ds
import rmap.common.utils as rm_utils
import rmap.common.constants as consts
import rmap.mapper.mapper as mapper
import rmap.mapper.sharing as sharing


def assign_ram(circuits: List[rm_ds.Circuit], arch: rm_ds.ArchParams) -> rm_ds.MappingResult:
    """
        Maps every logical RAM of every circuit and then shares physical RAMs where possible

        Circuits are processed in increasing id order and thier RAMs in the order they were read,
        each RAM gets the next group id starting from 0.

        Args:
            circuits: circuits to map
            arch: memory architecture being mapped to

        Returns:
            All mappings along with the design wide extra LUT and physical RAM totals (after sharing)

        Raises:
            RamMapConfigError: if no physical RAM type is enabled
            UnmappableMemoryError: if a logical RAM cannot be implemented
    """
    logger = logging.getLogger(consts.LOGGER_NAME)
    arch.validate()

    result = rm_ds.MappingResult()
    next_group_id = 0
    for circuit in sorted(circuits, key = lambda c: c.id):
        for mem in circuit.memories:
            mapping = mapper.choose_mapping_for_memory(circuit.id, mem, next_group_id, arch)
            next_group_id += 1
            result.extra_luts += mapping.extra_luts
            result.add_blocks(mapping.phys_type, mapping.phys_blocks)
            result.mappings.append(mapping)

    pre_share_blocks = (result.m8k_blocks, result.m128k_blocks)
    sharing.apply_sharing(result.mappings, arch, result)
    logger.info(
        f"{rm_utils.log_format_list('assign')} mapped {len(result.mappings)} logical RAMs, "
        f"LUTRAM {result.lutram_blocks} 8K {result.m8k_blocks} (from {pre_share_blocks[0]}) "
        f"128K {result.m128k_blocks} (from {pre_share_blocks[1]}) extra LUTs {result.extra_luts}"
    )
    return result
