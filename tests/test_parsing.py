from __future__ import annotations
import os
import logging

import pytest

import rmap.common.data_structs as rm_ds
import rmap.common.constants as consts
import rmap.mapper.parsing as parsing
import rmap.mapper.report as report


@pytest.mark.parsing
def test_read_logic_blocks(sample_inputs):
    logic_block_fpath, _ = sample_inputs
    assert parsing.read_logic_blocks(logic_block_fpath) == {0: 2394, 1: 1180}


@pytest.mark.parsing
def test_read_logical_rams_skips_bad_records(sample_inputs, caplog):
    _, logical_rams_fpath = sample_inputs
    with caplog.at_level(logging.WARNING, logger = consts.LOGGER_NAME):
        memories = parsing.read_logical_rams(logical_rams_fpath)
    assert [(cid, mem.ram_id) for cid, mem in memories] == [(0, 0), (2, 0), (2, 1), (2, 2)]
    assert memories[1][1] == rm_ds.LogicalMemory(ram_id = 0, mode = rm_ds.MemMode.TRUE_DUAL_PORT, depth = 512, width = 16)
    assert "Unknown RAM mode: BogusPort" in caplog.text
    assert "Bad depth: x" in caplog.text


@pytest.mark.parsing
def test_read_circuits_joins_files(sample_inputs):
    circuits = parsing.read_circuits(*sample_inputs)
    assert [c.id for c in circuits] == [0, 1, 2]
    assert [c.logic_blocks for c in circuits] == [2394, 1180, 0]
    assert [len(c.memories) for c in circuits] == [1, 0, 3]
    assert circuits[0].memories[0].bits == 8 * 1024


@pytest.mark.parsing
def test_missing_input_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        parsing.read_logic_blocks(os.path.join(str(tmp_path), "nope.txt"))


@pytest.mark.parsing
def test_write_mappings_sorted(tmp_path):
    def mapping(circuit_id: int, ram_id: int, group_id: int) -> rm_ds.RamMapping:
        return rm_ds.RamMapping(
            circuit_id = circuit_id, logical_ram_id = ram_id, extra_luts = 3, logical_width = 8, logical_depth = 1024,
            group_id = group_id, series = 2, parallel = 1, phys_type = rm_ds.PhysType.RAM_8K,
            mode = rm_ds.MemMode.SINGLE_PORT, phys_width = 8, phys_depth = 512, phys_blocks = 2,
        )
    out_fpath = os.path.join(str(tmp_path), "ram_mapped.txt")
    report.write_mappings(out_fpath, [mapping(1, 0, 2), mapping(0, 1, 1), mapping(0, 0, 0)])
    with open(out_fpath) as fd:
        lines = fd.read().splitlines()
    assert lines == [
        "0 0 3 LW 8 LD 1024 ID 0 S 2 P 1 Type 2 Mode SinglePort W 8 D 512",
        "0 1 3 LW 8 LD 1024 ID 1 S 2 P 1 Type 2 Mode SinglePort W 8 D 512",
        "1 0 3 LW 8 LD 1024 ID 2 S 2 P 1 Type 2 Mode SinglePort W 8 D 512",
    ]
