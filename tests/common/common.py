from __future__ import annotations
import os, sys

from typing import Any, List, Tuple

import ram_map as rm
import rmap.common.data_structs as rm_ds
import rmap.common.utils as rm_utils

import argparse

from deepdiff import DeepDiff


SAMPLE_LOGIC_BLOCK_LINES: List[str] = [
    "Circuit\t#Logic_blocks (N=10, k=6, Fcin = 0.15, Fcout = 0.1)",
    "0\t2394",
    "1\t1180",
    "this line is not a record",
]

# circuit 0 ram 1 has an unknown mode and circuit 1 ram 0 a bad depth, both are dropped
SAMPLE_LOGICAL_RAM_LINES: List[str] = [
    "Num_Circuits 3",
    "Circuit\tRamID\tMode\t\tDepth\tWidth",
    "0\t0\tSinglePort\t1024\t8",
    "0\t1\tBogusPort\t64\t4",
    "1\t0\tROM\tx\t8",
    "2\t0\tTrueDualPort\t512\t16",
    "2\t1\tSinglePort\t1024\t4",
    "2\t2\tROM\t1024\t4",
]


def write_input_files(
    out_dpath: str,
    logic_block_lines: List[str],
    logical_ram_lines: List[str],
) -> Tuple[str, str]:
    logic_block_fpath = os.path.join(out_dpath, "logic_block_count.txt")
    logical_rams_fpath = os.path.join(out_dpath, "logical_rams.txt")
    with open(logic_block_fpath, "w") as fd:
        fd.write("\n".join(logic_block_lines) + "\n")
    with open(logical_rams_fpath, "w") as fd:
        fd.write("\n".join(logical_ram_lines) + "\n")
    return logic_block_fpath, logical_rams_fpath


def run_ram_map(rm_args: rm_ds.RamMapArgs, just_print: bool = False) -> Any | None:
    cmd_str, sys_args, sys_kwargs = rm_args.get_ram_map_cli_cmd()
    print(f"Running: {cmd_str}")
    ret_val = None
    if not just_print:
        args_ns = argparse.Namespace(**sys_kwargs)
        ret_val = rm.main(args_ns)
    return ret_val


def make_circuit(circuit_id: int, logic_blocks: int, mems: List[Tuple[str, int, int]]) -> rm_ds.Circuit:
    """
        Args:
            mems: (mode token, depth, width) of each logical RAM, ram ids are assigned in order
    """
    return rm_ds.Circuit(
        id = circuit_id,
        logic_blocks = logic_blocks,
        memories = [
            rm_ds.LogicalMemory(ram_id = ram_id, mode = rm_ds.MemMode(mode), depth = depth, width = width)
            for ram_id, (mode, depth, width) in enumerate(mems)
        ],
    )


def dataclass_diff(test_obj: Any, golden_obj: Any) -> dict:
    """ DeepDiff of two dataclass trees after converting them to plain dicts """
    return DeepDiff(
        rm_utils.rec_convert_dataclass_to_dict(test_obj),
        rm_utils.rec_convert_dataclass_to_dict(golden_obj),
        verbose_level = 2,
    )
