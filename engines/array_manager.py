#!/usr/bin/env python3
"""
Array Manager
=============

Orchestration layer over a fixed universe of cells. Tracks which cells are
selected, assigns parameter sets in bulk, and keeps the name directory of
modules and subarrays. All electrical behaviour stays in the nodes
themselves; the manager only calls their public write and add/remove
contracts.
"""

import itertools
from typing import Dict, List, Optional

from config import DEFAULT_CONFIG, SUBARRAY_COLORS
from engines.cell import SolarCell
from engines.composite import Module, SubArray
from engines.exceptions import CellIncompleteError


class ArrayManager:
    """
    Owner of the cells of one physical array.

    Cells are created blank with ids 1..cell_count. Modules and subarrays are
    created on demand, addressed by name, and receive integer ids from a
    shared counter.
    """

    def __init__(self, cell_count: Optional[int] = None):
        cell_count = DEFAULT_CONFIG['array_cell_count'] if cell_count is None else cell_count
        if cell_count < 1:
            raise ValueError("Array must contain at least one cell")

        self.cells: Dict[int, SolarCell] = {i: SolarCell(i) for i in range(1, cell_count + 1)}
        self.active_cell_id: Optional[int] = None
        self._selection: List[int] = []

        self.modules: Dict[str, Module] = {}
        self.subarrays: Dict[str, SubArray] = {}
        self._ids = itertools.count(1)
        self._colors = itertools.cycle(SUBARRAY_COLORS)

    # =========================================================================
    # CELL SELECTION
    # =========================================================================

    def _cell(self, cell_id: int) -> SolarCell:
        if cell_id not in self.cells:
            raise KeyError(f"No cell with id {cell_id}")
        return self.cells[cell_id]

    def select_cell(self, cell_id: int):
        self._cell(cell_id)
        if cell_id not in self._selection:
            self._selection.append(cell_id)
        self.active_cell_id = cell_id

    def deselect_cell(self, cell_id: int):
        if cell_id in self._selection:
            self._selection.remove(cell_id)
        self.active_cell_id = min(self._selection) if self._selection else None

    def clear_selection(self):
        self._selection = []
        self.active_cell_id = None

    @property
    def selected_cells(self) -> List[SolarCell]:
        """Selected cells in ascending id order"""
        return [self.cells[i] for i in sorted(self._selection)]

    # =========================================================================
    # BULK PARAMETER ASSIGNMENT
    # =========================================================================

    def define_global_parameters(self, eta: float, Is: float, R: float,
                                 IoptMax: float, T: float):
        """Apply electrical parameters to every cell of the array"""
        for cell in self.cells.values():
            cell.set_parameters(eta=eta, Is=Is, R=R, IoptMax=IoptMax, T=T)

    def define_local_parameters(self, theta: float, phi: float):
        """Apply mounting angles to the selected cells"""
        for cell in self.selected_cells:
            cell.set_parameters(theta=theta, phi=phi)

    # =========================================================================
    # MODULE DIRECTORY
    # =========================================================================

    def add_module(self, name: str, bypass: bool = False) -> Module:
        if name in self.modules:
            raise ValueError(f"Module '{name}' already exists")
        module = Module(next(self._ids), bypass=bypass)
        self.modules[name] = module
        return module

    def module(self, name: str) -> Module:
        if name not in self.modules:
            raise KeyError(f"Module '{name}' not found. Available: {list(self.modules)}")
        return self.modules[name]

    def remove_module(self, name: str) -> Module:
        """Forget a module, detaching it from its subarray and releasing its cells"""
        module = self.module(name)
        for subarray in self.subarrays.values():
            for index, member in enumerate(subarray.modules):
                if member is module:
                    subarray.remove_module(index)
                    break
        for cell in module.cells:
            cell.parent_id = None
        return self.modules.pop(name)

    def add_selected_cells_to_module(self, name: str):
        """
        Append every selected cell to the named module.

        Raises:
            CellIncompleteError: a selected cell is not fully defined (the
                module is left untouched)
        """
        module = self.module(name)
        cells = self.selected_cells
        incomplete = [cell.id for cell in cells if not cell.is_defined]
        if incomplete:
            raise CellIncompleteError(f"Selected cells are not fully defined: {incomplete}")
        module.add_cells(cells)

    # =========================================================================
    # SUBARRAY DIRECTORY
    # =========================================================================

    def add_subarray(self, name: str, color: Optional[str] = None) -> SubArray:
        if name in self.subarrays:
            raise ValueError(f"SubArray '{name}' already exists")
        color = next(self._colors) if color is None else color
        subarray = SubArray(next(self._ids), color=color)
        self.subarrays[name] = subarray
        return subarray

    def subarray(self, name: str) -> SubArray:
        if name not in self.subarrays:
            raise KeyError(f"SubArray '{name}' not found. Available: {list(self.subarrays)}")
        return self.subarrays[name]

    def remove_subarray(self, name: str) -> SubArray:
        subarray = self.subarray(name)
        for module in subarray.modules:
            module.parent_id = None
        return self.subarrays.pop(name)

    def add_module_to_subarray(self, module_name: str, subarray_name: str):
        self.subarray(subarray_name).add_module(self.module(module_name))
