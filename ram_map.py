from __future__ import annotations

"""@package docstring
RAM-Map maps the logical RAMs of benchmark circuits onto the LUTRAM and block RAM resources of an FPGA
and estimates the area of the resulting chip.

Ex. python3 ram_map.py -lb logic_block_count.txt -lr logical_rams.txt -p true 0.5 true 8192 10 32 true 131072 300 128
"""

import argparse
import logging
import logging.handlers
import os

from typing import List, Tuple

import rmap.common.data_structs as rm_ds
import rmap.common.utils as rm_utils
import rmap.common.constants as consts

import rmap.mapper.ram_map as ram_map


# ██╗      ██████╗  ██████╗  ██████╗ ██╗███╗   ██╗ ██████╗
# ██║     ██╔═══██╗██╔════╝ ██╔════╝ ██║████╗  ██║██╔════╝
# ██║     ██║   ██║██║  ███╗██║  ███╗██║██╔██╗ ██║██║  ███╗
# ██║     ██║   ██║██║   ██║██║   ██║██║██║╚██╗██║██║   ██║
# ███████╗╚██████╔╝╚██████╔╝╚██████╔╝██║██║ ╚████║╚██████╔╝
# ╚══════╝ ╚═════╝  ╚═════╝  ╚═════╝ ╚═╝╚═╝  ╚═══╝ ╚═════╝


def init_logger(log_dpath: str | None = None, pending_records: List[logging.LogRecord] | None = None) -> logging.Logger:
    # Init Logger
    logger = logging.getLogger(consts.LOGGER_NAME)
    # Repeated calls from the same process (ex. tests) should not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG)
    fmt = logging.Formatter('%(message)s')
    # Create Stream Handler
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.DEBUG) # Set this handler to print out everything (debug is lowest level)
    stream_handler.setFormatter(fmt)
    logger.addHandler(stream_handler)
    # The file handler is only attached once the output directory is known
    if log_dpath is not None:
        file_handler = logging.FileHandler(os.path.abspath(os.path.join(log_dpath, f"ram_map_logging_{rm_ds.create_timestamp()}.log")))
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)
        # Records logged before the file handler existed (ex. config warnings)
        for record in pending_records or []:
            file_handler.handle(record)
    return logger


# ██████╗  █████╗ ███╗   ███╗      ███╗   ███╗ █████╗ ██████╗
# ██╔══██╗██╔══██╗████╗ ████║      ████╗ ████║██╔══██╗██╔══██╗
# ██████╔╝███████║██╔████╔██║█████╗██╔████╔██║███████║██████╔╝
# ██╔══██╗██╔══██║██║╚██╔╝██║╚════╝██║╚██╔╝██║██╔══██║██╔═══╝
# ██║  ██║██║  ██║██║ ╚═╝ ██║      ██║ ╚═╝ ██║██║  ██║██║
# ╚═╝  ╚═╝╚═╝  ╚═╝╚═╝     ╚═╝      ╚═╝     ╚═╝╚═╝  ╚═╝╚═╝

def main(args: argparse.Namespace | None = None) -> Tuple[rm_ds.MappingResult | None, rm_ds.RamMap]:
    # Console logging is up before parsing, config warnings are buffered until the log file exists
    logger = init_logger()
    config_records = logging.handlers.BufferingHandler(capacity = 1024)
    logger.addHandler(config_records)

    # Parse command line arguments
    args, default_arg_vals = rm_utils.parse_ram_map_cli_args(args)
    ram_map_info = rm_utils.init_structs_top(args, default_arg_vals)

    # Get logger into main, log file goes next to the reports
    logger = init_logger(ram_map_info.common.out_dpath, list(config_records.buffer))
    logger.setLevel(logging.DEBUG if ram_map_info.common.log_verbosity >= consts.DEBUG else logging.INFO)

    # If we want to return initialized data structs, just return here
    if ram_map_info.common.just_config_init:
        return None, ram_map_info

    result, _total_area = ram_map.run_ram_map_flow(ram_map_info)
    return result, ram_map_info


if __name__ == "__main__":
    main()
