from __future__ import annotations
import os
import glob
import logging

import pytest
import yaml

import rmap.common.data_structs as rm_ds
import rmap.common.utils as rm_utils
import rmap.common.constants as consts

import tests.common.common as tests_common


def conf_init(rm_args: rm_ds.RamMapArgs) -> rm_ds.RamMap:
    rm_args.just_config_init = True
    result, ram_map_info = tests_common.run_ram_map(rm_args)
    assert result is None
    return ram_map_info


@pytest.mark.config
def test_default_config_init(sample_ram_map_args: rm_ds.RamMapArgs):
    ram_map_info = conf_init(sample_ram_map_args)
    assert tests_common.dataclass_diff(ram_map_info.arch, rm_ds.ArchParams()) == {}
    assert os.path.isdir(ram_map_info.common.out_dpath)
    assert ram_map_info.logic_block_fpath == sample_ram_map_args.logic_block_fpath


@pytest.mark.config
def test_cli_cmd_only_passes_non_defaults():
    rm_args = rm_ds.RamMapArgs(arch__m8k_bits = 16384, arch__has_lutram = False)
    cmd_str, sys_args, sys_kwargs = rm_args.get_ram_map_cli_cmd()
    assert sys_kwargs == {"arch.m8k_bits": 16384, "arch.has_lutram": False}
    assert "--arch.has_lutram false" in cmd_str
    assert "--arch.m8k_bits 16384" in cmd_str


@pytest.mark.config
def test_hier_cli_args(sample_ram_map_args: rm_ds.RamMapArgs):
    sample_ram_map_args.arch__has_m128k = False
    sample_ram_map_args.arch__lbs_per_m8k = 20
    ram_map_info = conf_init(sample_ram_map_args)
    assert ram_map_info.arch.has_m128k is False
    assert ram_map_info.arch.lbs_per_m8k == 20
    assert [cfg.phys_type for cfg in ram_map_info.arch.enabled_configs()] == [rm_ds.PhysType.LUTRAM, rm_ds.PhysType.RAM_8K]


@pytest.mark.config
def test_legacy_arch_params(sample_ram_map_args: rm_ds.RamMapArgs):
    sample_ram_map_args.arch_params = ["false", "0.25", "1", "16384", "20", "64", "TRUE", "65536", "200", "64"]
    ram_map_info = conf_init(sample_ram_map_args)
    golden = rm_ds.ArchParams(
        has_lutram = False,
        lutram_fraction = 0.25,
        has_m8k = True,
        m8k_bits = 16384,
        lbs_per_m8k = 20,
        m8k_max_width = 64,
        has_m128k = True,
        m128k_bits = 65536,
        lbs_per_m128k = 200,
        m128k_max_width = 64,
    )
    assert tests_common.dataclass_diff(ram_map_info.arch, golden) == {}


@pytest.mark.config
def test_legacy_arch_params_keep_unparseable():
    arch_conf = {"has_lutram": True, "m8k_bits": 8192, "lutram_fraction": 0.5}
    out_conf = rm_utils.parse_legacy_arch_params(
        ["maybe", "half", "true", "abc", "10", "32", "true", "131072", "300", "128"],
        arch_conf,
    )
    assert out_conf["has_lutram"] is True
    assert out_conf["lutram_fraction"] == 0.5
    assert out_conf["m8k_bits"] == 8192
    assert out_conf["m128k_bits"] == 131072


@pytest.mark.config
def test_legacy_arch_params_wrong_count():
    with pytest.raises(rm_ds.RamMapConfigError):
        rm_utils.parse_legacy_arch_params(["true", "0.5"], {})


@pytest.mark.config
def test_lutram_fraction_out_of_range_keeps_default():
    arch = rm_utils.init_arch_params({"lutram_fraction": 1.5})
    assert arch.lutram_fraction == 0.5


@pytest.mark.config
def test_all_types_disabled(sample_ram_map_args: rm_ds.RamMapArgs):
    sample_ram_map_args.arch_params = ["false", "0.5", "false", "8192", "10", "32", "false", "131072", "300", "128"]
    with pytest.raises(rm_ds.RamMapConfigError, match = "At least one memory type"):
        conf_init(sample_ram_map_args)


@pytest.mark.config
def test_top_config_merge(tmp_path, sample_ram_map_args: rm_ds.RamMapArgs):
    top_config_fpath = os.path.join(str(tmp_path), "ram_map_conf.yml")
    with open(top_config_fpath, "w") as fd:
        yaml.safe_dump(
            {
                "arch": {"m8k_bits": 4096, "lbs_per_m8k": 5, "has_lutram": False},
                "results_fname": "stratix_results.csv",
            },
            fd,
        )
    sample_ram_map_args.top_config_fpath = top_config_fpath
    # cli wins over the config file
    sample_ram_map_args.arch__lbs_per_m8k = 12
    ram_map_info = conf_init(sample_ram_map_args)
    assert ram_map_info.arch.m8k_bits == 4096
    assert ram_map_info.arch.lbs_per_m8k == 12
    assert ram_map_info.arch.has_lutram is False
    assert ram_map_info.common.report.results_fname == "stratix_results.csv"


@pytest.mark.config
def test_bad_config_extension(tmp_path):
    conf_fpath = os.path.join(str(tmp_path), "conf.txt")
    with open(conf_fpath, "w") as fd:
        fd.write("arch: {}\n")
    with pytest.raises(rm_ds.RamMapConfigError):
        rm_utils.parse_config(conf_fpath)


@pytest.mark.config
def test_merge_cli_and_config_args():
    default = {"a": 1, "b": 2, "c": 3}
    cli = {"a": 1, "b": 5, "c": 3}
    config = {"a": 10, "b": 20, "d": 40}
    assert rm_utils.merge_cli_and_config_args(cli, config, default) == {"a": 10, "b": 5, "c": 3, "d": 40}


@pytest.mark.config
def test_lutram_fraction_out_of_range_keeps_config_value(caplog):
    with caplog.at_level(logging.WARNING, logger = consts.LOGGER_NAME):
        arch = rm_utils.init_arch_params(
            {"lutram_fraction": 0.3},
            ["true", "1.5", "true", "8192", "10", "32", "true", "131072", "300", "128"],
        )
    assert arch.lutram_fraction == 0.3
    assert "keeping 0.3" in caplog.text


@pytest.mark.config
def test_config_warnings_reach_log_file(sample_ram_map_args: rm_ds.RamMapArgs):
    sample_ram_map_args.arch_params = ["true", "1.5", "true", "8192", "10", "32", "true", "131072", "300", "128"]
    ram_map_info = conf_init(sample_ram_map_args)
    assert ram_map_info.arch.lutram_fraction == 0.5
    log_fpaths = glob.glob(os.path.join(ram_map_info.common.out_dpath, "ram_map_logging_*.log"))
    assert len(log_fpaths) == 1
    with open(log_fpaths[0]) as fd:
        log_text = fd.read()
    assert "lutram_fraction 1.5 is not between 0 and 1" in log_text
