from __future__ import annotations
from typing import List, Dict, Tuple, Optional
import logging

import rmap.common.data_structs as rm_ds
import rmap.common.utils as rm_utils
import rmap.common.constants as consts

# Header lines at the top of each input file
LOGIC_BLOCK_HEADER_LINES = 1
LOGICAL_RAM_HEADER_LINES = 2


def parse_int(token: str, res: rm_ds.Regexes) -> Optional[int]:
    if res.int_re.match(token):
        return int(token)
    return None


def read_logic_blocks(fpath: str, res: rm_ds.Regexes = None) -> Dict[int, int]:
    """
        Reads the number of logic blocks used by each circuit

        File format, after a single header line:
            <circuit_id> <logic_blocks>

        Args:
            fpath: path to the logic block count file
            res: regexes used for tokenizing

        Returns:
            dict of circuit id -> logic blocks, malformed lines are skipped

        Raises:
            FileNotFoundError: if `fpath` does not exist
    """
    res = rm_ds.Regexes() if res is None else res
    rm_utils.check_for_valid_path(fpath)
    logic_blocks: Dict[int, int] = {}
    with open(fpath, "r") as fd:
        for line_idx, line in enumerate(fd):
            line = line.strip()
            if line_idx < LOGIC_BLOCK_HEADER_LINES or not line:
                continue
            parts = res.wspace_re.split(line)
            if len(parts) < 2:
                continue
            circuit_id = parse_int(parts[0], res)
            num_lbs = parse_int(parts[1], res)
            if circuit_id is None or num_lbs is None:
                continue
            logic_blocks[circuit_id] = num_lbs
    return logic_blocks


def read_logical_rams(fpath: str, res: rm_ds.Regexes = None) -> List[Tuple[int, rm_ds.LogicalMemory]]:
    """
        Reads the logical RAMs of every circuit

        File format, after a "Num_Circuits <N>" line and a line of column names:
            <circuit_id> <ram_id> <mode> <depth> <width>

        Args:
            fpath: path to the logical RAM file
            res: regexes used for tokenizing

        Returns:
            list of (circuit id, logical RAM) in file order, malformed records are skipped with a warning

        Raises:
            FileNotFoundError: if `fpath` does not exist
    """
    logger = logging.getLogger(consts.LOGGER_NAME)
    res = rm_ds.Regexes() if res is None else res
    rm_utils.check_for_valid_path(fpath)
    modes: Dict[str, rm_ds.MemMode] = {mode.value: mode for mode in rm_ds.MemMode}
    int_fields = ("circuit id", "ram id", None, "depth", "width")

    memories: List[Tuple[int, rm_ds.LogicalMemory]] = []
    with open(fpath, "r") as fd:
        for line_idx, line in enumerate(fd):
            line = line.strip()
            if line_idx < LOGICAL_RAM_HEADER_LINES or not line:
                continue
            parts = res.wspace_re.split(line)
            if len(parts) < 5:
                continue
            values = []
            for token, field_name in zip(parts[:5], int_fields):
                if field_name is None:
                    values.append(modes.get(token))
                    if values[-1] is None:
                        logger.warning(f"{rm_utils.log_format_list('parse', fpath)} Unknown RAM mode: {token}")
                        break
                    continue
                values.append(parse_int(token, res))
                if values[-1] is None:
                    logger.warning(f"{rm_utils.log_format_list('parse', fpath)} Bad {field_name}: {token}")
                    break
            else:
                circuit_id, ram_id, mode, depth, width = values
                memories.append(
                    (circuit_id, rm_ds.LogicalMemory(ram_id = ram_id, mode = mode, depth = depth, width = width))
                )
    return memories


def read_circuits(logic_block_fpath: str, logical_rams_fpath: str, res: rm_ds.Regexes = None) -> List[rm_ds.Circuit]:
    """
        Reads both input files and joins them into circuits sorted by id

        Circuits which only appear in the logical RAM file are created with 0 logic blocks.
    """
    logger = logging.getLogger(consts.LOGGER_NAME)
    logic_blocks = read_logic_blocks(logic_block_fpath, res)
    circuits: Dict[int, rm_ds.Circuit] = {
        circuit_id: rm_ds.Circuit(id = circuit_id, logic_blocks = num_lbs) for circuit_id, num_lbs in logic_blocks.items()
    }
    for circuit_id, mem in read_logical_rams(logical_rams_fpath, res):
        circuits.setdefault(circuit_id, rm_ds.Circuit(id = circuit_id)).memories.append(mem)

    sorted_circuits = [circuits[circuit_id] for circuit_id in sorted(circuits.keys())]
    logger.info(
        f"{rm_utils.log_format_list('parse')} Read {len(sorted_circuits)} circuits with "
        f"{sum(len(circuit.memories) for circuit in sorted_circuits)} logical RAMs"
    )
    return sorted_circuits
