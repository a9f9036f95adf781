# input.py
import json
import logging
import re
from pathlib import Path
from typing import List, Sequence
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from graph import Edge, Graph, GraphError, Node


class InputError(ValueError):
    '''
    Raised when an input file or matrix cannot be turned into a graph.
    '''


def matrix_to_graph(matrix: Sequence[Sequence[int]]) -> Graph:
    '''
    Decode a square 0/1 adjacency matrix into a Graph.

    Node i gets id str(i+1). Only the upper triangle is read: matrix[i][j] == 1
    with j > i adds an edge between nodes i+1 and j+1. The diagonal is ignored.
    '''
    n = len(matrix)
    if n == 0:
        raise InputError("Empty matrix")
    for i, row in enumerate(matrix):
        if len(row) != n:
            raise InputError(f"Matrix is not square: row {i + 1} has {len(row)} cells, expected {n}")
        for j, cell in enumerate(row):
            if cell not in (0, 1):
                raise InputError(f"Matrix cell ({i + 1}, {j + 1}) must be 0 or 1, got {cell!r}")

    if any(matrix[i][j] != matrix[j][i] for i in range(n) for j in range(i + 1, n)):
        logging.warning("Adjacency matrix is not symmetric, only the upper triangle is used")

    nodes = [Node(str(i + 1)) for i in range(n)]
    edges, edge_id = [], 1
    for i in range(n):
        for j in range(i + 1, n):
            if matrix[i][j] == 1:
                edges.append(Edge(f"e{edge_id}", nodes[i].id, nodes[j].id))
                edge_id += 1
    logging.info(f"Decoded matrix: {n} nodes, {len(edges)} edges")
    return Graph(nodes, edges)


def _to_cell(token: str):
    try:
        value = float(token)
    except ValueError:
        raise InputError(f"Invalid matrix cell {token!r}") from None
    return int(value) if value.is_integer() else value


def parse_matrix(text: str) -> Graph:
    '''
    Parse matrix text such as "0,1,0;1,0,1;0,1,0".
    Rows are separated by ';' or newlines, cells by ',' or whitespace.
    '''
    rows = [r.strip() for r in re.split(r"[;\n]", text.strip()) if r.strip()]
    matrix: List[List] = [[_to_cell(tok) for tok in re.split(r"[,\s]+", r) if tok] for r in rows]
    return matrix_to_graph(matrix)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_xlsx(path) -> Graph:
    '''
    Read the first sheet of an XLSX file as an adjacency matrix.

    Empty cells count as 0, so a blank row/column inside the matrix is an
    isolated node. Only blank rows and columns after the last filled cell are
    dropped.
    '''
    try:
        wb = openpyxl.load_workbook(path, data_only=True)
    except (OSError, InvalidFileException, BadZipFile, KeyError) as exc:
        raise InputError(f"Could not read spreadsheet {path}: {exc}") from exc
    try:
        rows = [list(r) for r in wb.worksheets[0].iter_rows(min_row=1, min_col=1, values_only=True)]
    finally:
        wb.close()

    filled = [(i, j) for i, row in enumerate(rows) for j, v in enumerate(row) if not _is_blank(v)]
    if not filled:
        raise InputError(f"Spreadsheet {path} is empty")
    n_rows = max(i for i, _ in filled) + 1
    n_cols = max(j for _, j in filled) + 1
    matrix = [
        [0 if _is_blank(v) else _to_cell(str(v)) for v in (row + [None] * n_cols)[:n_cols]]
        for row in rows[:n_rows]
    ]
    return matrix_to_graph(matrix)


def parse_json(path) -> Graph:
    '''
    Read a {nodes: [{id}], edges: [{id, source, target}]} JSON file.
    '''
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise InputError(f"Could not read graph file {path}: {exc}") from exc
    try:
        return Graph.from_dict(data)
    except GraphError as exc:
        raise InputError(f"Invalid graph in {path}: {exc}") from exc


def parse_file(path) -> Graph:
    '''
    Load a graph from path, dispatching on the extension:
    .xlsx -> spreadsheet matrix, .json -> node/edge lists, anything else -> matrix text.
    '''
    suffix = Path(path).suffix.lower()
    if suffix == ".xlsx":
        return parse_xlsx(path)
    if suffix == ".json":
        return parse_json(path)
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise InputError(f"Could not read matrix file {path}: {exc}") from exc
    return parse_matrix(text)
