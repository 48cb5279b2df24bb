from __future__ import annotations

import pytest

import rmap.common.data_structs as rm_ds
import rmap.mapper.assign as assign
import rmap.mapper.sharing as sharing

import tests.common.common as tests_common


@pytest.mark.sharing
def test_two_half_full_single_ports_merge(m8k_only_arch: rm_ds.ArchParams):
    circuits = [tests_common.make_circuit(0, 100, [("SinglePort", 1024, 4), ("SinglePort", 1024, 4)])]
    result = assign.assign_ram(circuits, m8k_only_arch)
    first, second = result.mappings
    assert result.m8k_blocks == 1
    assert first.mode == second.mode == rm_ds.MemMode.TRUE_DUAL_PORT
    assert first.group_id == second.group_id == 0
    assert (first.phys_width, first.phys_depth) == (second.phys_width, second.phys_depth) == (4, 2048)


@pytest.mark.sharing
def test_rom_shares_with_single_port(default_arch: rm_ds.ArchParams):
    circuits = [tests_common.make_circuit(0, 100, [("ROM", 1024, 4), ("SinglePort", 1024, 4)])]
    result = assign.assign_ram(circuits, default_arch)
    assert result.m8k_blocks == 1
    assert {m.group_id for m in result.mappings} == {0}


@pytest.mark.sharing
def test_no_sharing_across_circuits(m8k_only_arch: rm_ds.ArchParams):
    circuits = [
        tests_common.make_circuit(0, 100, [("SinglePort", 1024, 4)]),
        tests_common.make_circuit(1, 100, [("SinglePort", 1024, 4)]),
    ]
    result = assign.assign_ram(circuits, m8k_only_arch)
    assert result.m8k_blocks == 2
    assert all(m.mode == rm_ds.MemMode.SINGLE_PORT for m in result.mappings)
    assert [m.group_id for m in result.mappings] == [0, 1]


@pytest.mark.sharing
def test_bits_must_fill_the_ram(m8k_only_arch: rm_ds.ArchParams):
    # 4096 + 2048 bits leaves part of the RAM unused
    circuits = [tests_common.make_circuit(0, 100, [("SinglePort", 1024, 4), ("SinglePort", 512, 4)])]
    result = assign.assign_ram(circuits, m8k_only_arch)
    assert result.m8k_blocks == 2
    assert [m.group_id for m in result.mappings] == [0, 1]


@pytest.mark.sharing
def test_each_mapping_merges_once(m8k_only_arch: rm_ds.ArchParams):
    circuits = [tests_common.make_circuit(0, 100, [("SinglePort", 1024, 4)] * 3)]
    result = assign.assign_ram(circuits, m8k_only_arch)
    assert result.m8k_blocks == 2
    assert [m.group_id for m in result.mappings] == [0, 0, 2]
    assert result.mappings[2].mode == rm_ds.MemMode.SINGLE_PORT


@pytest.mark.sharing
def test_dual_port_modes_are_not_candidates(m8k_only_arch: rm_ds.ArchParams):
    cfg = m8k_only_arch.m8k_config()
    circuits = [tests_common.make_circuit(0, 100, [("SimpleDualPort", 1024, 4), ("SimpleDualPort", 1024, 4)])]
    result = assign.assign_ram(circuits, m8k_only_arch)
    assert not any(sharing.is_share_candidate(m, cfg) for m in result.mappings)
    assert result.m8k_blocks == 2


@pytest.mark.sharing
def test_share_candidate_rules(m8k_only_arch: rm_ds.ArchParams):
    cfg = m8k_only_arch.m8k_config()
    base = dict(
        circuit_id = 0, logical_ram_id = 0, extra_luts = 0, group_id = 0, series = 1, parallel = 1,
        phys_type = rm_ds.PhysType.RAM_8K, mode = rm_ds.MemMode.SINGLE_PORT, phys_blocks = 1,
    )
    half_full = rm_ds.RamMapping(logical_width = 4, logical_depth = 1024, phys_width = 4, phys_depth = 2048, **base)
    full = rm_ds.RamMapping(logical_width = 8, logical_depth = 1024, phys_width = 8, phys_depth = 1024, **base)
    too_wide = rm_ds.RamMapping(logical_width = 32, logical_depth = 128, phys_width = 32, phys_depth = 256, **base)
    assert sharing.is_share_candidate(half_full, cfg)
    assert not sharing.is_share_candidate(full, cfg)
    # wider than the true dual port max width (16)
    assert not sharing.is_share_candidate(too_wide, cfg)
    assert not sharing.is_share_candidate(half_full, m8k_only_arch.m128k_config())


@pytest.mark.sharing
def test_share_type_returns_updated_total(m8k_only_arch: rm_ds.ArchParams):
    cfg = m8k_only_arch.m8k_config()
    circuits = [tests_common.make_circuit(0, 100, [("SinglePort", 1024, 4)] * 4)]
    result = assign.assign_ram(circuits, m8k_only_arch)
    # already shared, a second pass has nothing left to pair
    assert sharing.share_type(result.mappings, cfg, result.m8k_blocks) == result.m8k_blocks == 2


@pytest.mark.sharing
def test_pair_depths_must_fit_the_ram(m8k_only_arch: rm_ds.ArchParams):
    cfg = m8k_only_arch.m8k_config()
    base = dict(
        circuit_id = 0, extra_luts = 0, group_id = 0, series = 1, parallel = 1, phys_type = rm_ds.PhysType.RAM_8K,
        mode = rm_ds.MemMode.SINGLE_PORT, phys_width = 4, phys_depth = 2048, phys_blocks = 1,
    )
    wide = rm_ds.RamMapping(logical_ram_id = 0, logical_width = 4, logical_depth = 1536, **base)
    narrow = rm_ds.RamMapping(logical_ram_id = 1, logical_width = 1, logical_depth = 2048, **base)
    # 6144 + 2048 bits fill the RAM but 1536 + 2048 words do not fit in 2048
    assert wide.logical_bits + narrow.logical_bits == cfg.bits
    assert not sharing.can_pair(wide, narrow, cfg)

    half = rm_ds.RamMapping(logical_ram_id = 2, logical_width = 4, logical_depth = 1024, **base)
    other_half = rm_ds.RamMapping(logical_ram_id = 3, logical_width = 4, logical_depth = 1024, **base)
    assert sharing.can_pair(half, other_half, cfg)
