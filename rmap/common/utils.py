from __future__ import annotations
from typing import List, Dict, Tuple, Any, Type
import enum
import os, yaml
import argparse

import logging

from dataclasses import fields
import dataclasses
import json

from pathlib import Path
import copy

# RAM-Map modules
import rmap.common.data_structs as rm_ds
import rmap.common.constants as consts

import re
import pandas as pd

# Common modules
from collections.abc import MutableMapping

# Defining cli globally for easy access in other functions perfoming read actions
ram_map_cli = rm_ds.RamMapCLI()

# Order of the values passed to the legacy `-p` arg, matches `ArchParams` field names
LEGACY_ARCH_PARAM_KEYS: Tuple[str, ...] = (
    "has_lutram",
    "lutram_fraction",
    "has_m8k",
    "m8k_bits",
    "lbs_per_m8k",
    "m8k_max_width",
    "has_m128k",
    "m128k_bits",
    "lbs_per_m128k",
    "m128k_max_width",
)


# ██╗      ██████╗  ██████╗  ██████╗ ██╗███╗   ██╗ ██████╗
# ██║     ██╔═══██╗██╔════╝ ██╔════╝ ██║████╗  ██║██╔════╝
# ██║     ██║   ██║██║  ███╗██║  ███╗██║██╔██╗ ██║██║  ███╗
# ██║     ██║   ██║██║   ██║██║   ██║██║██║╚██╗██║██║   ██║
# ███████╗╚██████╔╝╚██████╔╝╚██████╔╝██║██║ ╚████║╚██████╔╝
# ╚══════╝ ╚═════╝  ╚═════╝  ╚═════╝ ╚═╝╚═╝  ╚═══╝ ╚═════╝

def log_format_list(*args : Tuple[str]) -> str:
    """
    Args:
        args (Tuple[str]): A tuple of strings to be formatted into a log message

    Returns:
        A log message of format [{arg1}][{arg2}]...[{argN}]
    """
    # Format the extra arguments as [{arg1}][{arg2}]...[{argN}]
    if args:
        formatted_args = "".join([f"[{arg}]" for arg in args]) + ":"
    else:
        formatted_args = ":"
    return formatted_args


#  ██████╗ ███████╗███╗   ██╗███████╗██████╗  █████╗ ██╗         ██╗   ██╗████████╗██╗██╗     ███████╗
# ██╔════╝ ██╔════╝████╗  ██║██╔════╝██╔══██╗██╔══██╗██║         ██║   ██║╚══██╔══╝██║██║     ██╔════╝
# ██║  ███╗█████╗  ██╔██╗ ██║█████╗  ██████╔╝███████║██║         ██║   ██║   ██║   ██║██║     ███████╗
# ██║   ██║██╔══╝  ██║╚██╗██║██╔══╝  ██╔══██╗██╔══██║██║         ██║   ██║   ██║   ██║██║     ╚════██║
# ╚██████╔╝███████╗██║ ╚████║███████╗██║  ██║██║  ██║███████╗    ╚██████╔╝   ██║   ██║███████╗███████║
#  ╚═════╝ ╚══════╝╚═╝  ╚═══╝╚══════╝╚═╝  ╚═╝╚═╝  ╚═╝╚══════╝     ╚═════╝    ╚═╝   ╚═╝╚══════╝╚══════╝

def rec_convert_dataclass_to_dict(obj, key: str = None):
    """
        Converts a dict / dataclass of nested dicts / dataclasses into a dictionary object
        Enums are converted to thier values and loggers / regexes are skipped
    """
    if isinstance(obj, (logging.Logger, re.Pattern)):
        return None
    elif dataclasses.is_dataclass(obj):
        # manually traversing the dataclass fields, asdict would deepcopy the logger
        result = {}
        for _field in dataclasses.fields(obj):
            field_val = getattr(obj, _field.name)
            result[_field.name] = rec_convert_dataclass_to_dict(field_val, _field.name)
        return result
    elif isinstance(obj, enum.Enum):
        return obj.value
    elif isinstance(obj, (list, tuple)):
        return [rec_convert_dataclass_to_dict(i, key) for i in obj]
    elif isinstance(obj, dict):
        return {k: rec_convert_dataclass_to_dict(v, k) for k, v in obj.items()}
    # checks if instance is any primitive type, if its not then its a non dataclass class so we have to ignore for now
    elif not isinstance(obj, (str, int, float, bool)) and obj is not None:
        return None
    # Case for exporting paths so tests can be non system specific
    elif isinstance(obj, str) and key != None and 'path' in key:
        return obj.replace(os.path.expanduser('~'), '~')
    else:
        return obj


def flatten(dictionary, parent_key='', separator='.') -> dict:
    """
        Turns a nested dictionary into a flattened one with seperator delimited keys

        Examples:
            >>> dictionary = {"a": {"b": 1, "c": 2}, "d": {"e": {"f": 3}}}
            >>> flatten(dictionary)
            {"a.b": 1, "a.c": 2, "d.e.f": 3}

        Args:
            dictionary: The dictionary to flatten
            parent_key: Key of any parent dict field
            separator: The separator to use between keys

        Returns:
            A flattened dictionary with separator delimited heirarchy to replace a previous nested dict
    """
    items = []
    for key, value in dictionary.items():
        new_key = parent_key + separator + key if parent_key else key
        if isinstance(value, MutableMapping):
            items.extend(flatten(value, new_key, separator=separator).items())
        else:
            items.append((new_key, value))
    return dict(items)


def get_df_output_lines(df: pd.DataFrame) -> List[str]:
    """
        From an input dataframe returns a list of strings that can be printed to the console in a human readable table format.
        The sizing of columns is adjusted automatically based on size of max string in col

        Args:
            df: The dataframe to output

        Returns:
            A list of strings of the dataframe in human readable format
    """
    max_col_lens = max([len(str(col)) for col in df.columns])
    cell_lens = [0]
    for col in df.columns:
        for row_idx in range(len(df.index)):
            cell_lens.append(len(str(df[col].iloc[row_idx])))

    cell_chars = max(max_col_lens, max(cell_lens)) + 2
    ncols = len(df.columns)
    seperator = "+".join(["-"*cell_chars]*ncols)
    format_str = f"{{:^{cell_chars}}}"
    df_output_lines = [
        seperator,
        "|".join([format_str for _ in range(ncols)]).format(*df.columns),
        seperator,
        *["|".join([format_str for _ in range(ncols)]).format(*[str(v) for v in row.values]) for _, row in df.iterrows()],
        seperator,
    ]
    return df_output_lines


def create_bordered_str(text: str = "", border_char: str = "#", total_len: int = 100) -> List[str]:
    """
        Creates a bordered string with text in the center

        Args:
            text: The text to put in the center of the bordered string
            border_char: The character to use for the border
            total_len: The total length of the bordered string

        Returns:
            A list of 3 strings, the top border, the text with side borders, and the bottom border
    """
    text = f"  {text}  "
    text_len = len(text)
    if text_len > total_len:
        total_len = text_len + 10
    border_size = (total_len - text_len) // 2
    return [ border_char * total_len, f"{border_char * border_size}{text}{border_char * border_size}", border_char * total_len]


#
#### Parsing Utilities ####

def check_for_valid_path(path: str) -> bool:
    """
        Takes in path and determines if it exists

        Args:
            path: The path to check for existence

        Returns:
            True if path exists

        Raises:
            FileNotFoundError: If the path does not exist
    """
    if not os.path.exists(os.path.abspath(path)):
        raise FileNotFoundError(f"ERROR: {path} does not exist")
    return True


def clean_path(unsafe_path: str, validate_path: bool = True) -> str:
    """
        Takes in possibly unsafe path and returns a sanitized path

        Args:
            unsafe_path: The path to sanitize
            validate_path: Whether to validate the path or not

        Raises:
            FileNotFoundError: If the path does not exist

        Returns:
            The sanitized path
    """
    safe_path = os.path.abspath(os.path.expanduser(unsafe_path))
    # We want to turn off the path checker when loading in config files which may point to files generated later
    if validate_path:
        check_for_valid_path(safe_path)
    return safe_path


def sanitize_config(config_dict: Dict[str, Any], validate_paths: bool = True) -> dict:
    """
        Modifies values of a flattened config dict to do the following:
            - Expand home paths to absolute paths for any key containing "path"

        Args:
            config_dict: The configuration dictionary to sanitize
            validate_paths: Whether to validate the path or not

        Returns:
            The sanitized configuration dictionary
    """
    sanitized = {}
    for key, val in config_dict.items():
        if "path" in key and isinstance(val, str):
            sanitized[key] = clean_path(val, validate_paths)
        else:
            sanitized[key] = val
    return sanitized


def parse_config(conf_path: str, validate_paths: bool = True, sanitize: bool = True) -> dict:
    """
        Parses a yaml or json config file and returns a flattened dictionary of its values.

        Args:
            conf_path: The path to the configuration file
            validate_paths: Whether to validate the path or not
            sanitize: Whether to sanitize the configuration or not

        Returns:
            A flat dict, keys of nested sections are joined with "." (ex. "arch.m8k_bits")

        Raises:
            RamMapConfigError: If the conf fpath does not end in .yml | .yaml | .json
            FileNotFoundError: If the conf fpath does not exist
    """
    if conf_path.endswith(".yaml") or conf_path.endswith(".yml"):
        is_yaml = True
    elif conf_path.endswith(".json"):
        is_yaml = False
    else:
        raise rm_ds.RamMapConfigError(f"ERROR: config file {conf_path} is not a yaml or json file")
    # In case the path of config itself is a userpath we expand it
    in_conf_fpath: str = clean_path(conf_path)
    conf_text = Path(in_conf_fpath).read_text()
    loaded_config = yaml.safe_load(conf_text) if is_yaml else json.loads(conf_text)
    if loaded_config is None:
        loaded_config = {}
    if not isinstance(loaded_config, dict):
        raise rm_ds.RamMapConfigError(f"ERROR: config file {conf_path} must contain a mapping at its top level")
    conf_dict = flatten(loaded_config)
    if sanitize:
        conf_dict = sanitize_config(conf_dict, validate_paths)
    return conf_dict


def init_dataclass(
    dataclass_type: Type,
    in_config: dict,
    add_arg_config: dict = {},
    validate_paths: bool = True
) -> Any:
    """
    Initializes a dataclass with values from the dataclasses internal initialization functions and input configuration dictionaries
    which have key value pairs mapped to dataclass fields.
    Additionally performs path sanitization

    There is a priority by which the dataclass is initialized (highest to lowest):
        1. in_config
        2. add_arg_config
        3. default / default_factory

    Args:
        dataclass_type: The dataclass type which is to be initialized
        in_config: The input configuration dictionary which contains the values for the dataclass fields
        add_arg_config: Additional argument configuration dictionary which contains values for the dataclass fields
            which may or may not be defined in the input configuration
        validate_paths: A boolean flag which determines if paths in the dataclass should be validated to exist on the system

    Returns:
        dataclass instantiation with values from merge of data sources in priority order
    """
    dataclass_inputs = {}
    for _field in fields(dataclass_type):
        if not _field.init:
            continue
        if _field.name in in_config and in_config[_field.name] is not None:
            val = in_config[_field.name]
        elif _field.name in add_arg_config and add_arg_config[_field.name] is not None:
            val = add_arg_config[_field.name]
        else:
            # Left to the dataclass default
            continue
        if "path" in _field.name and isinstance(val, str):
            val = clean_path(val, validate_paths)
        dataclass_inputs[_field.name] = val
    return dataclass_type(**dataclass_inputs)


#  ██████╗██╗     ██╗
# ██╔════╝██║     ██║
# ██║     ██║     ██║
# ██║     ██║     ██║
# ╚██████╗███████╗██║
#  ╚═════╝╚══════╝╚═╝

def convert_namespace(in_namespace: argparse.Namespace) -> List[str] | None:
    """
        Converts a namespace to an arg list of cli strings (space seperated)
        This is used for being able to run ram_map properly either from the command line or from a python script

        Args:
            in_namespace: The input namespace to convert

        Returns:
            A list of cli arguments as strings
    """
    if in_namespace != None:
        arg_list = []
        for key, val in vars(in_namespace).items():
            if val is None:
                continue
            if isinstance(val, list):
                arg_list.append(f"--{key}")
                arg_list += [str(v) for v in val]
            elif isinstance(val, bool):
                cli_opt = next((cli_arg for cli_arg in ram_map_cli.cli_args if cli_arg.key == key), None)
                if cli_opt is not None and cli_opt.action != "store_true":
                    arg_list += [f"--{key}", str(val).lower()]
                elif val:
                    arg_list.append(f"--{key}")
            elif isinstance(val, (str, int, float)):
                arg_list.append(f"--{key}")
                arg_list.append(f"{val}")
    else:
        arg_list = None

    return arg_list


def parse_ram_map_cli_args(in_args: argparse.Namespace = None) -> Tuple[argparse.Namespace, Dict[str, Any]]:
    """
        Parses the RAM-Map args

        Examples:
            >>> args = None
            >>> args, default_arg_vals = parse_ram_map_cli_args(args)

        Args:
            in_args: The input namespace to parse (if None then args are taken from sys.argv[1:])

        Returns:
            The parsed namespace and the default argument values
    """
    # converting namespace to list of cli arguments if we get namespace
    assert isinstance(in_args, argparse.Namespace) or in_args == None, "ERROR: in_args must be a argparse.Namespace object or None"
    arg_list = convert_namespace(in_args)

    parser = argparse.ArgumentParser(description="RAM-Map: maps logical RAMs of benchmark circuits onto FPGA physical RAMs and estimates area")

    # dict storing key value pairs for default values of each arg
    default_arg_vals = {
        **ram_map_cli._defaults,
    }
    for cli_arg in ram_map_cli.cli_args:
        rm_ds.add_arg(parser, cli_arg)

    if arg_list == None:
        args = parser.parse_args()
    else:
        args = parser.parse_args(args = arg_list)

    return args, default_arg_vals


def max_depth(d: dict) -> int:
    """
        returns the level of nesting of a particular dict
    """
    if isinstance(d, dict):
        return 1 + max((max_depth(value) for value in d.values()), default=0)
    else:
        return 0


def merge_cli_and_config_args(
    cli: Dict[str, Any],
    config: Dict[str, Any],
    default: Dict[str, Any],
) -> Dict[str, Any]:
    """
        Merges the cli and config args into a single dictionary
        This allows users to have a config file describing a full architecture and override some of its params with cli args

        Args:
            cli: RAM-Map args coming from CLI
            config: RAM-Map args coming from top level conf file
            default: RAM-Map args coming from the initialized default values

        Returns:
            A dict of arguments merged in order of priority (cli > config > default)
    """
    result_conf = {}
    if config == None:
        result_conf = copy.deepcopy(cli)
    elif cli == None:
        result_conf = copy.deepcopy(config)
    else:
        # The merging will only work if they are not nested dicts
        assert max_depth(cli) <= 1 and max_depth(config) <= 1, "ERROR: Merging only works for non nested dictionaries"
        for k_cli, v_cli in cli.items():
            if k_cli in config:
                # A cli value which differs from its default was explicitly passed by the user so it wins
                if k_cli in default and v_cli == default[k_cli]:
                    result_conf[k_cli] = config[k_cli]
                else:
                    result_conf[k_cli] = v_cli
            else:
                result_conf[k_cli] = v_cli
        # config only keys
        for k_conf, v_conf in config.items():
            if k_conf not in result_conf:
                result_conf[k_conf] = v_conf

    return result_conf


def strip_hier(
    in_dict: Dict[str, Any],
    strip_tag: str,
    only_tagged_keys: bool = True
) -> Dict[str, Any]:
    """
        Removes heirarchy with <strip_tag> from keys in a dictionary

        Args:
            in_dict: The input dictionary to strip
            strip_tag: Which tag to remove from dict keys
            only_tagged_keys: Determines if keys without the strip tag will be put into the output dict

        Returns:
            The dictionary with the heirarchy removed from the keys
    """
    strip_tag_re = re.compile(f"^{re.escape(strip_tag)}\\.")
    out_dict = {}
    for k, v in in_dict.items():
        # If the strip tag with a dot suffix is in the key
        if strip_tag_re.search(k):
            out_dict[strip_tag_re.sub("", k)] = v
        elif not only_tagged_keys:
            out_dict[k] = v
    return out_dict


def parse_legacy_arch_params(arch_params: List[str], arch_conf: Dict[str, Any]) -> Dict[str, Any]:
    """
        Applies the positional `-p` architecture values on top of an existing arch config dict

        Each value is only applied if it parses into its field type, otherwise the existing value is kept

        Args:
            arch_params: the 10 string values in the order of `LEGACY_ARCH_PARAM_KEYS`
            arch_conf: arch config dict with `ArchParams` field names as keys

        Returns:
            A new arch config dict with the parsed values applied

        Raises:
            RamMapConfigError: If the wrong number of values is passed
    """
    logger = logging.getLogger(consts.LOGGER_NAME)
    if len(arch_params) != len(LEGACY_ARCH_PARAM_KEYS):
        raise rm_ds.RamMapConfigError(
            f"ERROR: -p expects {len(LEGACY_ARCH_PARAM_KEYS)} arguments: {' '.join(LEGACY_ARCH_PARAM_KEYS)}"
        )
    arch_field_types = {_field.name: _field.type for _field in fields(rm_ds.ArchParams)}
    out_conf = copy.deepcopy(arch_conf)
    for key, raw_val in zip(LEGACY_ARCH_PARAM_KEYS, arch_params):
        # from __future__ annotations leaves field types as strings
        field_type: str = str(arch_field_types[key])
        try:
            if field_type == "bool":
                val = rm_ds.str_to_bool(raw_val)
            elif field_type == "float":
                val = float(raw_val)
            else:
                val = int(raw_val)
        except (ValueError, argparse.ArgumentTypeError):
            logger.warning(f"{log_format_list('config')} Could not parse '{raw_val}' for {key}, keeping {out_conf.get(key)}")
            continue
        out_conf[key] = val
    return out_conf


# ██╗███╗   ██╗██╗████████╗
# ██║████╗  ██║██║╚══██╔══╝
# ██║██╔██╗ ██║██║   ██║
# ██║██║╚██╗██║██║   ██║
# ██║██║ ╚████║██║   ██║
# ╚═╝╚═╝  ╚═══╝╚═╝   ╚═╝

def init_common_structs(common_conf: Dict[str, Any]) -> rm_ds.Common:
    """
        Initializes the data structure common to all of RAM-Map

        Args:
            common_conf: A dictionary that should contain keys mapped 1:1 to `rm_ds.Common` data structure fields

        Returns:
            The initialized `rm_ds.Common` data structure
    """
    common_inputs = copy.deepcopy(common_conf)
    # Output directory is created here so downstream writers can assume it exists
    if common_inputs.get("out_dpath") is not None:
        out_dpath = clean_path(common_inputs["out_dpath"], validate_path = False)
        os.makedirs(out_dpath, exist_ok = True)
        common_inputs["out_dpath"] = out_dpath
    report = rm_ds.ReportInfo(
        **{k: common_inputs[k] for k in ("results_fname", "mapping_fname") if common_inputs.get(k) is not None}
    )
    common_inputs["report"] = report
    common = init_dataclass(rm_ds.Common, common_inputs, validate_paths = False)
    return common


def init_arch_params(arch_conf: Dict[str, Any], arch_params: List[str] | None = None) -> rm_ds.ArchParams:
    """
        Initializes and validates the memory architecture description

        Args:
            arch_conf: dict with keys mapped 1:1 to `rm_ds.ArchParams` fields
            arch_params: optional legacy `-p` values, applied over `arch_conf`

        Returns:
            The initialized `rm_ds.ArchParams`

        Raises:
            RamMapConfigError: If no physical RAM type is enabled
    """
    logger = logging.getLogger(consts.LOGGER_NAME)
    defaults = rm_ds.ArchParams()
    arch_inputs = copy.deepcopy(arch_conf)
    # Out of range fractions fall back to the last valid value, the config / cli value before `-p` is applied
    fallback_fraction = defaults.lutram_fraction
    if arch_inputs.get("lutram_fraction") is not None and 0.0 <= float(arch_inputs["lutram_fraction"]) <= 1.0:
        fallback_fraction = float(arch_inputs["lutram_fraction"])
    if arch_params is not None:
        arch_inputs = parse_legacy_arch_params(arch_params, arch_inputs)
    for key in ("has_lutram", "has_m8k", "has_m128k"):
        if key in arch_inputs and arch_inputs[key] is not None:
            arch_inputs[key] = rm_ds.str_to_bool(arch_inputs[key])
    lutram_fraction = arch_inputs.get("lutram_fraction")
    if lutram_fraction is not None and not (0.0 <= float(lutram_fraction) <= 1.0):
        logger.warning(
            f"{log_format_list('config')} lutram_fraction {lutram_fraction} is not between 0 and 1, keeping {fallback_fraction}"
        )
        arch_inputs["lutram_fraction"] = fallback_fraction
    arch = init_dataclass(rm_ds.ArchParams, arch_inputs, validate_paths = False)
    arch.validate()
    return arch


def init_structs_top(args: argparse.Namespace, default_arg_vals: Dict[str, Any]) -> rm_ds.RamMap:
    """
        Initializes the data structures for RAM-Map

        Examples:
            >>> args, default_arg_vals = parse_ram_map_cli_args(args)
            >>> ram_map_info = init_structs_top(args, default_arg_vals)

        Args:
            args: The parsed argparse namespace created by parse_ram_map_cli_args() function
            default_arg_vals: The default values for all the arguments derived from cli options

        Returns:
            The `rm_ds.RamMap` data structure used to run the flow
    """
    top_conf = None
    if args.top_config_fpath is not None:
        top_conf = parse_config(args.top_config_fpath, validate_paths = False, sanitize = True)
    cli_dict = copy.deepcopy(vars(args))
    # Compare cli (and defaults) against the config file, cli values that differ from defaults take priority
    result_conf = merge_cli_and_config_args(cli_dict, top_conf, default_arg_vals)

    common = init_common_structs({
        key: result_conf.get(key) for key in ("out_dpath", "log_verbosity", "just_config_init", "results_fname", "mapping_fname")
    })
    arch = init_arch_params(
        strip_hier(result_conf, strip_tag = "arch"),
        result_conf.get("arch_params"),
    )
    ram_map_info = rm_ds.RamMap(
        common = common,
        arch = arch,
        # Input files are only required to exist once the flow is run
        logic_block_fpath = clean_path(result_conf["logic_block_fpath"], validate_path = False),
        logical_rams_fpath = clean_path(result_conf["logical_rams_fpath"], validate_path = False),
    )
    return ram_map_info
