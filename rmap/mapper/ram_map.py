from __future__ import annotations
from typing import Tuple
import os
import time
import logging

import rmap.common.data_structs as rm_ds
import rmap.common.utils as rm_utils
import rmap.common.constants as consts

import rmap.mapper.parsing as parsing
import rmap.mapper.assign as assign
import rmap.mapper.area as area
import rmap.mapper.report as report


def print_arch_params(arch: rm_ds.ArchParams) -> None:
    logger = logging.getLogger(consts.LOGGER_NAME)
    for line in rm_utils.create_bordered_str("MEMORY ARCHITECTURE"):
        logger.info(line)
    logger.info(f"  LUTRAM: {'enabled' if arch.has_lutram else 'disabled'} (LUTRAM fraction {arch.lutram_fraction})")
    logger.info(
        f"  8K BRAM: {'enabled' if arch.has_m8k else 'disabled'} "
        f"({arch.m8k_bits} bits, max width {arch.m8k_max_width}, 1 per {arch.lbs_per_m8k} LBs)"
    )
    logger.info(
        f"  128K BRAM: {'enabled' if arch.has_m128k else 'disabled'} "
        f"({arch.m128k_bits} bits, max width {arch.m128k_max_width}, 1 per {arch.lbs_per_m128k} LBs)"
    )


def run_ram_map_flow(ram_map_info: rm_ds.RamMap) -> Tuple[rm_ds.MappingResult, float]:
    """
        Runs the full RAM-Map flow:
            1. reads the circuits
            2. maps every logical RAM and shares physical RAMs
            3. writes the per circuit results csv and the RAM mapping file to the output directory
            4. logs the geometric mean of per circuit areas and the area of the whole design

        Args:
            ram_map_info: initialized RAM-Map data structures

        Returns:
            The post sharing mapping result and the area of an FPGA holding every circuit
    """
    common: rm_ds.Common = ram_map_info.common
    logger = common.logger
    arch = ram_map_info.arch

    start_time = time.time()
    print_arch_params(arch)

    circuits = parsing.read_circuits(ram_map_info.logic_block_fpath, ram_map_info.logical_rams_fpath, common.res)
    result = assign.assign_ram(circuits, arch)
    total_area = area.compute_total_area(circuits, result, arch)

    results_df = report.circuit_results_df(circuits, result.mappings, arch)
    results_fpath = os.path.join(common.out_dpath, common.report.results_fname)
    mapping_fpath = os.path.join(common.out_dpath, common.report.mapping_fname)
    report.write_results_csv(results_fpath, results_df)
    report.write_mappings(mapping_fpath, result.mappings)

    if common.log_verbosity >= consts.INFO and len(results_df.index) > 0:
        for line in rm_utils.get_df_output_lines(results_df):
            logger.info(line)

    geom_area = area.geometric_mean_area(results_df["Total_FPGA_Area"].tolist())
    logger.info(f"{rm_utils.log_format_list('results')} Wrote {results_fpath}")
    logger.info(f"{rm_utils.log_format_list('results')} Wrote {mapping_fpath}")
    logger.info(f"Total FPGA area = {total_area:.5e} {common.report.area_display_unit}")
    logger.info(f"Geometric mean FPGA area = {geom_area:.5e} {common.report.area_display_unit}")
    logger.info(f"Program runtime: {time.time() - start_time:.3f}s")
    return result, total_area
