# -*- coding: utf-8 -*-
"""
    Implementations for Data structures used across RAM-Map
"""

from __future__ import annotations

from dataclasses import dataclass, field, make_dataclass

import re
import enum
from typing import Pattern, Dict, List, Any, Tuple, Type, ClassVar, Protocol
from datetime import datetime
import logging
import argparse

import rmap.common.constants as consts

# Constants
CLI_HIER_KEY = "."
STRUCT_HIER_KEY = "__"


# ██████╗  █████╗ ███╗   ███╗      ███╗   ███╗ █████╗ ██████╗
# ██╔══██╗██╔══██╗████╗ ████║      ████╗ ████║██╔══██╗██╔══██╗
# ██████╔╝███████║██╔████╔██║█████╗██╔████╔██║███████║██████╔╝
# ██╔══██╗██╔══██║██║╚██╔╝██║╚════╝██║╚██╔╝██║██╔══██║██╔═══╝
# ██║  ██║██║  ██║██║ ╚═╝ ██║      ██║ ╚═╝ ██║██║  ██║██║
# ╚═╝  ╚═╝╚═╝  ╚═╝╚═╝     ╚═╝      ╚═╝     ╚═╝╚═╝  ╚═╝╚═╝

class Dataclass(Protocol):
    """
        Idea from `https://stackoverflow.com/questions/54668000/type-hint-for-an-instance-of-a-non-specific-dataclass`
        Used as a way to type hint a dataclass instance without knowing the specific dataclass
    """
    __dataclass_fields__: ClassVar[Dict[str, Any]]


class RamMapConfigError(ValueError):
    """ Raised when the run configuration cannot produce a legal mapping run (ex. every RAM type disabled) """


class UnmappableMemoryError(ValueError):
    """ Raised when a logical RAM has no legal implementation under any enabled physical RAM type """


def create_timestamp(fmt_only_flag: bool = False) -> str:
    """
        Creates a timestamp string in below format

        Args:
            fmt_only_flag : If true will return the format string instead of the formatted timestamp

        Return:
            timestamp string in format "YYYY--MM--DD--HH--MM--SS--fff" OR
            the datetime format string used to parse it back
    """
    now = datetime.now()

    timestamp_format = "{year:04}--{month:02}--{day:02}--{hour:02}--{minute:02}--{second:02}--{milliseconds:03}"
    formatted_timestamp = timestamp_format.format(
        year=now.year,
        month=now.month,
        day=now.day,
        hour=now.hour,
        minute=now.minute,
        second=now.second,
        milliseconds=int(now.microsecond // 1e3),
    )
    dt_format = "%Y--%m--%d--%H--%M--%S--%f"

    retval = dt_format if fmt_only_flag else formatted_timestamp
    return retval


def str_to_bool(val: str | bool | int) -> bool:
    """
        Converts cli / config style booleans ("true", "False", "1", "0") into a bool

        Raises:
            argparse.ArgumentTypeError: if the value is not a recognized boolean
    """
    if isinstance(val, bool):
        return val
    if isinstance(val, int):
        return val != 0
    lowered = str(val).strip().lower()
    if lowered in ("true", "1"):
        return True
    elif lowered in ("false", "0"):
        return False
    raise argparse.ArgumentTypeError(f"ERROR: '{val}' is not a valid boolean, expected one of true/false/1/0")


@dataclass
class Regexes:
    """
        Stores all regexes used in RAM-Map parsing, its more convenient to have them all in one place

        Attributes:
            wspace_re: regex to match any whitespace character
            int_re: regex to match a (possibly signed) integer token
    """
    wspace_re: Pattern = re.compile(r"\s+")
    int_re: Pattern = re.compile(r"^[-+]?\d+$")


@dataclass
class ReportInfo:
    """
        Information relevant to report information and filenames

        Attributes:
            results_fname: fname of the per circuit csv report
            mapping_fname: fname of the ram mapping file, one line per logical RAM
            area_display_unit: default unit to display in human readable fmt area info
    """
    results_fname: str = consts.RESULTS_FNAME
    mapping_fname: str = consts.MAPPING_FNAME
    area_display_unit: str = "MWTAs"


#  ██████╗██╗     ██╗
# ██╔════╝██║     ██║
# ██║     ██║     ██║
# ██║     ██║     ██║
# ╚██████╗███████╗██║
#  ╚═════╝╚══════╝╚═╝

@dataclass
class GeneralCLI:
    """
        Struct to contain all info related to a command line interface arg used in RAM-Map

        Attributes:
            key: key for the cli argument, will be translated to '--<key>' in the command line
            help_msg: help message for the cli argument
            datatype: datatype of the cli argument
            shortcut: optional shortcut for the cli argument, will be translated to '-<shortcut>' in the command line
            default_val: default value for the cli argument
            optional: flag to determine if the cli argument is optional
            nargs: optional argument to determine the number of arguments the cli argument can take
            choices: optional argument to determine the possible legal values for the datatype
            action: optional argument to determine the action to take when the cli argument is parsed
    """
    key: str
    help_msg: str
    datatype: Any = None
    shortcut: str = None
    default_val: Any = None
    optional: bool = False
    nargs : str | int = None # optional
    choices: List[Any] = None # optional
    action: str = None # optional if datatype != bool

    def __post_init__(self):
        if self.action == "store_true":
            self.default_val = False


def add_arg(
        parser: argparse.ArgumentParser,
        cli_opt: GeneralCLI,
) -> None:
    """
        Adds an argument to an argparse parser based on the GeneralCLI object passed in

        Args:
            parser: argparse.ArgumentParser object to add the argument to
            cli_opt: GeneralCLI object containing the argument information to add to

        Examples:
            >>>     ram_map_cli = rm_ds.RamMapCLI()
            >>>     for cli_arg in ram_map_cli.cli_args:
            >>>         rm_ds.add_arg(parser, cli_arg)
    """
    # Create list to deal with optional shortcut
    arg_keys = []
    if cli_opt.shortcut != None:
        arg_keys.append(cli_opt.shortcut)
    arg_keys.append(f"--{cli_opt.key}")

    arg_dict = {
        "type" : cli_opt.datatype,
        "help" : cli_opt.help_msg,
        "default" : cli_opt.default_val,
        "nargs" : cli_opt.nargs,
        "choices" : cli_opt.choices,
    }
    # If arg values are None we remove them from the `parser.add_argument()` call
    arg_dict = {key: val for key, val in arg_dict.items() if val is not None}

    if cli_opt.action == "store_true":
        parser.add_argument(*arg_keys, action = cli_opt.action, help = cli_opt.help_msg)
    else:
        parser.add_argument(*arg_keys, **arg_dict)


@dataclass
class ParentCLI:
    """
        Base class for a CLI class in RAM-Map

        Attributes:
            cli_args: list of GeneralCLI objects to define the CLI args
            _fields: dict of field names and their datatypes
            _defaults: dict of field names and their default values
    """
    cli_args: List[GeneralCLI] = None

    # Initialized in __post_init__
    _fields: Dict[str, Any] = None # key, datatype pairs for all fields in this dataclass
    _defaults: Dict[str, Any] = None # key, default_val pairs for all fields in this dataclass

    def __post_init__(self):
        """
            Verfies `cli_args` and initializes `_fields` and `_defaults` dicts

            Raises:
                Exception: if `cli_args` is None
        """
        if self.cli_args == None:
            raise Exception("No cli_args provided for CLI class")
        self._fields = dict(sorted(
            {_field.key : _field.datatype for _field in self.cli_args}.items()
        ))
        self._defaults = dict(sorted(
            {_field.key : _field.default_val for _field in self.cli_args}.items()
        ))

    def get_dataclass_fields(self) -> List[Tuple[str, Any, Any]]:
        """
            Returns the cli derived fields in the format expected by `dataclasses.make_dataclass`
            The "." character is invalid for field names so its replaced with a double underscore here,
            it gets converted back when args are written to the command line
        """
        dc_fields = []
        for key, dtype in self._fields.items():
            # nargs args are stored as lists
            cli_opt = next(cli_arg for cli_arg in self.cli_args if cli_arg.key == key)
            if cli_opt.nargs is not None:
                dtype = List[dtype]
            elif cli_opt.action == "store_true" or cli_opt.datatype is str_to_bool:
                dtype = bool
            dc_fields.append(
                (key.replace(CLI_HIER_KEY, STRUCT_HIER_KEY), dtype, field(default = self._defaults[key]))
            )
        return dc_fields


def get_dyn_class(cls_name: str, cli: ParentCLI, bases: Tuple[Any] = None) -> Type[Dataclass]:
    """
        Creates a dataclass type object with one field per cli argument defined in `cli`

        Args:
            cls_name: name of the class to create
            cli: cli definition used as the factory for the fields
            bases: base classes for the new class

        Returns:
            dataclass type whose instances hold values for each of the cli args
    """
    bases_arg = () if bases == None else bases
    return make_dataclass(cls_name, cli.get_dataclass_fields(), bases = bases_arg)


@dataclass
class RamMapCLI(ParentCLI):
    """
        Dataclass to hold all command line interface arguments for the RAM-Map tool

        Attributes:
            cli_args: list of GeneralCLI objects to define the CLI args
            no_use_arg_list: list of arguments which should not be passed in the command line interface when calling RAM-Map
    """
    cli_args: List[GeneralCLI] = field(default_factory = lambda: [
        GeneralCLI(key = "top_config_fpath", shortcut = "-tc", datatype = str, help_msg = "path to (optional) RAM-Map yaml or json config file"),
        GeneralCLI(key = "logic_block_fpath", shortcut = "-lb", datatype = str, default_val = "logic_block_count.txt", help_msg = "path to file containing the number of logic blocks used by each circuit"),
        GeneralCLI(key = "logical_rams_fpath", shortcut = "-lr", datatype = str, default_val = "logical_rams.txt", help_msg = "path to file containing the logical RAMs of each circuit"),
        GeneralCLI(key = "out_dpath", shortcut = "-o", datatype = str, default_val = ".", help_msg = "directory the results csv and ram mapping file are written to"),
        GeneralCLI(key = "results_fname", datatype = str, default_val = consts.RESULTS_FNAME, help_msg = "fname of the per circuit results csv"),
        GeneralCLI(key = "mapping_fname", datatype = str, default_val = consts.MAPPING_FNAME, help_msg = "fname of the ram mapping output file"),
        GeneralCLI(key = "log_verbosity", shortcut = "-v", datatype = int, default_val = consts.BRIEF, choices = [consts.BRIEF, consts.INFO, consts.DEBUG], help_msg = "verbosity of logger output, 0 brief, 1 info, 2 debug"),
        GeneralCLI(key = "just_config_init", datatype = bool, action = "store_true", help_msg = "Flag to return initialized data structures, without running anything"),
        GeneralCLI(
            key = "arch_params", shortcut = "-p", datatype = str, nargs = 10,
            help_msg = "legacy positional architecture description: has_lutram lutram_fraction has_ram1 ram1_bits lbs_per_ram1 max_width_ram1 has_ram2 ram2_bits lbs_per_ram2 max_width_ram2"
        ),
        # Architecture args
        GeneralCLI(key = "arch.has_lutram", datatype = str_to_bool, default_val = True, help_msg = "enable LUTRAM capable logic blocks"),
        GeneralCLI(key = "arch.lutram_fraction", datatype = float, default_val = 0.5, help_msg = "fraction of logic blocks which can operate as LUTRAM"),
        GeneralCLI(key = "arch.has_m8k", datatype = str_to_bool, default_val = True, help_msg = "enable the 8K class block RAM"),
        GeneralCLI(key = "arch.m8k_bits", datatype = int, default_val = 8192, help_msg = "bit capacity of the 8K class block RAM"),
        GeneralCLI(key = "arch.lbs_per_m8k", datatype = int, default_val = 10, help_msg = "number of logic blocks per 8K class block RAM site"),
        GeneralCLI(key = "arch.m8k_max_width", datatype = int, default_val = 32, help_msg = "max data width of the 8K class block RAM (non true dual port)"),
        GeneralCLI(key = "arch.has_m128k", datatype = str_to_bool, default_val = True, help_msg = "enable the 128K class block RAM"),
        GeneralCLI(key = "arch.m128k_bits", datatype = int, default_val = 128 * 1024, help_msg = "bit capacity of the 128K class block RAM"),
        GeneralCLI(key = "arch.lbs_per_m128k", datatype = int, default_val = 300, help_msg = "number of logic blocks per 128K class block RAM site"),
        GeneralCLI(key = "arch.m128k_max_width", datatype = int, default_val = 128, help_msg = "max data width of the 128K class block RAM (non true dual port)"),
    ])

    no_use_arg_list: List[str] = None # list of arguments which should not be used in the command line interface when calling RAM-Map

    def decode_dataclass_to_cli(self, cmd_str: str, _field: str, args_dict: Dict[str, Any]) -> str:
        """
            Decodes a dataclass field to a string that can be run from the command line to invoke RAM-Map

            Args:
                cmd_str: string to append decoded dataclass field to
                _field: field name to decode
                args_dict: dict equivalent of the cmd_str to store decoded fields

            Returns:
                cmd_str: string with the decoded field appended
                    e.g. "python3 ram_map.py --<field1> <value1> ..."
        """
        val = getattr(self, _field)
        _cli_field: str = _field.replace(STRUCT_HIER_KEY, CLI_HIER_KEY)
        if val is None:
            return cmd_str
        cli_opt = next(cli_arg for cli_arg in self.cli_args if cli_arg.key == _cli_field)
        # bools can be positivly evaluated as ints as well so this should be above the int eval
        if isinstance(val, bool):
            if cli_opt.action == "store_true":
                if val:
                    args_dict[_cli_field] = val
                    cmd_str += f" --{_cli_field}"
            else:
                # Non flag bools are passed as values to be parsed by `str_to_bool`
                args_dict[_cli_field] = val
                cmd_str += f" --{_cli_field} {str(val).lower()}"
        elif isinstance(val, list):
            args_dict[_cli_field] = [str(v) for v in val]
            cmd_str += f" --{_cli_field} {' '.join(args_dict[_cli_field])}"
        elif isinstance(val, (str, int, float)):
            args_dict[_cli_field] = val
            cmd_str += f" --{_cli_field} {val}"
        else:
            raise Exception(f"Unsupported type for {_cli_field} in {self}")
        return cmd_str

    def get_ram_map_cli_cmd(self, ram_map_home: str = ".") -> Tuple[str, List[str], Dict[str, Any]]:
        """
            Args:
                ram_map_home: path to the RAM-Map home directory

            Returns:
                cmd_str: string to run from the command line to invoke RAM-Map
                sys_args: list of strings to run from the command line to invoke RAM-Map
                sys_args_dict: dict equivalent of the sys_args list, keys are cli keys
        """
        sys_args_dict = {}
        cmd_str = f"python3 {ram_map_home}/ram_map.py"
        for _field in self.__class__.__dataclass_fields__:
            _field_cli_key: str = _field.replace(STRUCT_HIER_KEY, CLI_HIER_KEY)
            # Only args derived from cli_args which differ from thier defaults are passed
            if _field_cli_key in self._defaults and getattr(self, _field) != self._defaults[_field_cli_key]:
                if not ( self.no_use_arg_list != None and ( _field in self.no_use_arg_list ) ):
                    cmd_str = self.decode_dataclass_to_cli(cmd_str = cmd_str, _field = _field, args_dict = sys_args_dict)
        sys_args = cmd_str.split(" ")[2:] # skip over the <python3 ram_map.py>
        return cmd_str, sys_args, sys_args_dict


# RamMapCLI is definitions but we basically want to use it as a factory to create the dataclass which holds values for input args
ram_map_cli = RamMapCLI()
RamMapArgs = get_dyn_class(
    cls_name = "RamMapArgs",
    cli = ram_map_cli,
    bases = (RamMapCLI,),
)


@dataclass
class Common:
    """
        Dataclass to hold all common data structures used in RAM-Map

        Attributes:
            just_config_init: flag to determine if the invocation will just initialze data structures and not run the mapper
            out_dpath: directory which reports are written to
            logger: logger object for RAM-Map
            log_verbosity: verbosity level for the logger & other outputs
            res: Regexes object to hold all regexes used in RAM-Map
            report: ReportInfo object to hold report info used in RAM-Map
    """
    just_config_init: bool = False
    out_dpath: str = "."

    # Logging
    logger: logging.Logger = logging.getLogger(consts.LOGGER_NAME)

    # Verbosity level
    # 0 - Brief output
    # 1 - Per circuit results table
    # 2 - Every mapping decision and merge
    log_verbosity: int = consts.BRIEF

    res: Regexes = field(default_factory = Regexes)
    report: ReportInfo = field(default_factory = ReportInfo)


# ███╗   ███╗███████╗███╗   ███╗ ██████╗ ██████╗ ██╗   ██╗
# ████╗ ████║██╔════╝████╗ ████║██╔═══██╗██╔══██╗╚██╗ ██╔╝
# ██╔████╔██║█████╗  ██╔████╔██║██║   ██║██████╔╝ ╚████╔╝
# ██║╚██╔╝██║██╔══╝  ██║╚██╔╝██║██║   ██║██╔══██╗  ╚██╔╝
# ██║ ╚═╝ ██║███████╗██║ ╚═╝ ██║╚██████╔╝██║  ██║   ██║
# ╚═╝     ╚═╝╚══════╝╚═╝     ╚═╝ ╚═════╝ ╚═╝  ╚═╝   ╚═╝

class MemMode(enum.Enum):
    """ Access mode of a logical RAM, values match the tokens used in the input and mapping files """
    ROM = "ROM"
    SINGLE_PORT = "SinglePort"
    SIMPLE_DUAL_PORT = "SimpleDualPort"
    TRUE_DUAL_PORT = "TrueDualPort"


class PhysType(enum.Enum):
    """ Physical RAM resource types, values are the type ids written to the mapping file """
    LUTRAM = 1
    RAM_8K = 2
    RAM_128K = 3


# Evaluation order of physical RAM types, on an exact cost tie the type evaluated first is kept
PHYS_TYPE_ORDER: Tuple[PhysType, ...] = (PhysType.LUTRAM, PhysType.RAM_8K, PhysType.RAM_128K)


@dataclass(frozen = True)
class PhysConfig:
    """
        Physical RAM resource description, fixed for a run

        Attributes:
            phys_type: which physical RAM type this describes
            bits: total bit capacity of a single physical RAM
            max_width_non_tdp: max data width in ROM / single port / simple dual port modes
            max_width_tdp: max data width in true dual port mode, 0 if the mode is unsupported
    """
    phys_type: PhysType
    bits: int
    max_width_non_tdp: int
    max_width_tdp: int

    def max_width(self, mode: MemMode) -> int:
        return self.max_width_tdp if mode == MemMode.TRUE_DUAL_PORT else self.max_width_non_tdp


# LUTRAM is not configurable, a LB in LUTRAM mode can implement 64x10 or 32x20 single port memories
PHYS_LUTRAM = PhysConfig(
    phys_type = PhysType.LUTRAM,
    bits = consts.LUTRAM_BITS,
    max_width_non_tdp = max(consts.LUTRAM_SHAPES.keys()),
    max_width_tdp = 0,
)


@dataclass(frozen = True)
class LogicalMemory:
    """ A RAM as requested by a circuit, independent of its physical implementation """
    ram_id: int
    mode: MemMode
    depth: int
    width: int

    @property
    def bits(self) -> int:
        return self.width * self.depth


@dataclass
class Circuit:
    id: int
    logic_blocks: int = 0
    memories: List[LogicalMemory] = field(default_factory = list)


@dataclass
class RamMapping:
    """
        Physical implementation chosen for one logical RAM

        Attributes:
            circuit_id: id of the circuit the logical RAM belongs to
            logical_ram_id: id of the logical RAM within its circuit
            extra_luts: LUTs needed for address decoding and output muxing of series RAMs
            logical_width: width of the logical RAM
            logical_depth: depth of the logical RAM
            group_id: id shared by two logical RAMs packed into the same physical RAMs, unique otherwise
            series: number of physical RAMs chained in depth
            parallel: number of physical RAMs placed side by side in width
            phys_type: physical RAM type used
            mode: access mode of the physical RAM, promoted to TrueDualPort when two RAMs are packed together
            phys_width: configured width of each physical RAM
            phys_depth: configured depth of each physical RAM
            phys_blocks: total physical RAMs used (series * parallel)
    """
    circuit_id: int
    logical_ram_id: int
    extra_luts: int
    logical_width: int
    logical_depth: int
    group_id: int
    series: int
    parallel: int
    phys_type: PhysType
    mode: MemMode
    phys_width: int
    phys_depth: int
    phys_blocks: int

    @property
    def logical_bits(self) -> int:
        return self.logical_width * self.logical_depth


@dataclass
class MappingResult:
    """ All RAM mappings of a run along with the design wide resource totals (after sharing) """
    mappings: List[RamMapping] = field(default_factory = list)
    extra_luts: int = 0
    lutram_blocks: int = 0
    m8k_blocks: int = 0
    m128k_blocks: int = 0

    def add_blocks(self, phys_type: PhysType, num_blocks: int) -> None:
        if phys_type == PhysType.LUTRAM:
            self.lutram_blocks += num_blocks
        elif phys_type == PhysType.RAM_8K:
            self.m8k_blocks += num_blocks
        elif phys_type == PhysType.RAM_128K:
            self.m128k_blocks += num_blocks


@dataclass
class ArchParams:
    """
        Input params to describe the FPGA memory architecture

        Attributes:
            has_lutram: Are logic blocks able to operate as LUTRAM?
            lutram_fraction: Fraction of logic blocks which support LUTRAM mode
            has_m8k: Is the 8K class block RAM in the architecture?
            m8k_bits: Bits in a single 8K class block RAM
            lbs_per_m8k: Logic blocks per 8K class block RAM site, sets the ratio of RAM columns to LB columns
            m8k_max_width: Max width of the 8K class block RAM outside of true dual port mode
            has_m128k: Is the 128K class block RAM in the architecture?
            m128k_bits: Bits in a single 128K class block RAM
            lbs_per_m128k: Logic blocks per 128K class block RAM site
            m128k_max_width: Max width of the 128K class block RAM outside of true dual port mode
    """
    has_lutram: bool        = True
    lutram_fraction: float  = 0.5
    has_m8k: bool           = True
    m8k_bits: int           = 8192
    lbs_per_m8k: int        = 10
    m8k_max_width: int      = 32
    has_m128k: bool         = True
    m128k_bits: int         = 128 * 1024
    lbs_per_m128k: int      = 300
    m128k_max_width: int    = 128

    def m8k_config(self) -> PhysConfig:
        # In true dual port mode each port gets half of the RAM's data pins
        return PhysConfig(
            phys_type = PhysType.RAM_8K,
            bits = self.m8k_bits,
            max_width_non_tdp = self.m8k_max_width,
            max_width_tdp = self.m8k_max_width // 2,
        )

    def m128k_config(self) -> PhysConfig:
        return PhysConfig(
            phys_type = PhysType.RAM_128K,
            bits = self.m128k_bits,
            max_width_non_tdp = self.m128k_max_width,
            max_width_tdp = self.m128k_max_width // 2,
        )

    def enabled_configs(self) -> List[PhysConfig]:
        """
            Returns:
                Configs of all enabled physical RAM types ordered by `PHYS_TYPE_ORDER`
        """
        cfgs = {
            PhysType.LUTRAM: PHYS_LUTRAM if self.has_lutram else None,
            PhysType.RAM_8K: self.m8k_config() if self.has_m8k else None,
            PhysType.RAM_128K: self.m128k_config() if self.has_m128k else None,
        }
        return [cfgs[phys_type] for phys_type in PHYS_TYPE_ORDER if cfgs[phys_type] is not None]

    def validate(self) -> None:
        """
            Raises:
                RamMapConfigError: if no physical RAM type is enabled
        """
        if not (self.has_lutram or self.has_m8k or self.has_m128k):
            raise RamMapConfigError("ERROR: At least one memory type (LUTRAM, M8K, or M128K) must be enabled")


@dataclass
class RamMap:
    """
        Data structure to run the RAM-Map flow

        Attributes:
            common: common settings for RAM-Map
            arch: memory architecture being mapped to
            logic_block_fpath: path to the per circuit logic block count file
            logical_rams_fpath: path to the logical RAM description file
    """
    common: Common
    arch: ArchParams
    logic_block_fpath: str
    logical_rams_fpath: str
