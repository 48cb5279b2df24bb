from __future__ import annotations
import os, sys

from typing import List, Tuple

# Try appending ram_map base path to sys.path
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

import rmap.common.data_structs as rm_ds
import tests.common.common as tests_common

import pytest


@pytest.fixture
def default_arch() -> rm_ds.ArchParams:
    return rm_ds.ArchParams()


@pytest.fixture
def m8k_only_arch() -> rm_ds.ArchParams:
    """
        Returns:
            Architecture with only the 8K block RAM enabled (8192 bits, max width 32)
    """
    return rm_ds.ArchParams(has_lutram = False, has_m8k = True, has_m128k = False)


@pytest.fixture
def sample_inputs(tmp_path) -> Tuple[str, str]:
    """
        Writes a small pair of RAM-Map input files

        Returns:
            (logic block count fpath, logical rams fpath)
    """
    return tests_common.write_input_files(
        str(tmp_path),
        logic_block_lines = tests_common.SAMPLE_LOGIC_BLOCK_LINES,
        logical_ram_lines = tests_common.SAMPLE_LOGICAL_RAM_LINES,
    )


@pytest.fixture
def sample_ram_map_args(tmp_path, sample_inputs) -> rm_ds.RamMapArgs:
    logic_block_fpath, logical_rams_fpath = sample_inputs
    out_dpath = os.path.join(str(tmp_path), "outputs")
    return rm_ds.RamMapArgs(
        logic_block_fpath = logic_block_fpath,
        logical_rams_fpath = logical_rams_fpath,
        out_dpath = out_dpath,
    )
