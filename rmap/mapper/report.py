from __future__ import annotations
from typing import List, Dict, Any

import pandas as pd

import rmap.common.data_structs as rm_ds
import rmap.mapper.area as area

RESULTS_COLUMNS = [
    "Circuit",
    "LUTRAM_Blocks_Used",
    "8K_BRAMs_Used",
    "128K_BRAMs_Used",
    "Regular_LBs_Used",
    "Required_LB_Tiles",
    "Total_FPGA_Area",
]


def mapping_line(mapping: rm_ds.RamMapping) -> str:
    return (
        f"{mapping.circuit_id} {mapping.logical_ram_id} {mapping.extra_luts} "
        f"LW {mapping.logical_width} LD {mapping.logical_depth} ID {mapping.group_id} "
        f"S {mapping.series} P {mapping.parallel} Type {mapping.phys_type.value} Mode {mapping.mode.value} "
        f"W {mapping.phys_width} D {mapping.phys_depth}"
    )


def write_mappings(fpath: str, mappings: List[rm_ds.RamMapping]) -> None:
    """
        Writes one line per mapping ordered by (circuit id, logical RAM id)

        Line format:
            <cid> <rid> <extra_luts> LW <lw> LD <ld> ID <group_id> S <series> P <parallel> Type <1|2|3> Mode <mode> W <w> D <d>
    """
    sorted_mappings = sorted(mappings, key = lambda m: (m.circuit_id, m.logical_ram_id))
    with open(fpath, "w") as fd:
        for mapping in sorted_mappings:
            fd.write(mapping_line(mapping) + "\n")


def circuit_results_df(
    circuits: List[rm_ds.Circuit],
    mappings: List[rm_ds.RamMapping],
    arch: rm_ds.ArchParams,
) -> pd.DataFrame:
    """
        Builds the per circuit results table, each circuit is sized as if it were alone on its own FPGA

        Args:
            circuits: circuits which were mapped
            mappings: post sharing mappings
            arch: memory architecture

        Returns:
            dataframe with `RESULTS_COLUMNS` columns and one row per circuit in id order
    """
    usages = area.tally_usage(circuits, mappings)
    rows: List[Dict[str, Any]] = []
    for circuit_id in sorted(usages.keys()):
        usage = usages[circuit_id]
        breakdown = area.fpga_area(usage, arch)
        rows.append({
            "Circuit": circuit_id,
            "LUTRAM_Blocks_Used": usage.lutram_blocks,
            "8K_BRAMs_Used": usage.m8k_blocks,
            "128K_BRAMs_Used": usage.m128k_blocks,
            "Regular_LBs_Used": breakdown.regular_lbs,
            "Required_LB_Tiles": breakdown.required_lb_tiles,
            "Total_FPGA_Area": round(breakdown.total_area, 3),
        })
    return pd.DataFrame.from_records(rows, columns = RESULTS_COLUMNS)


def write_results_csv(fpath: str, results_df: pd.DataFrame) -> None:
    results_df.to_csv(fpath, index = False)
