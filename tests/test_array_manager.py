#!/usr/bin/env python3
"""
Tests for Array Manager
=======================

Selection, bulk parameter assignment and the module / subarray directory.
"""

import pytest
import numpy as np
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import DEFAULT_CONFIG, SUBARRAY_COLORS
from engines.array_manager import ArrayManager
from engines.exceptions import CellIncompleteError

GLOBAL_PARAMETERS = dict(eta=2.0, Is=0.005, R=0.003, IoptMax=2.0, T=303.0)


class TestSelection:
    """Test cell selection bookkeeping"""

    @pytest.fixture
    def manager(self):
        return ArrayManager(cell_count=6)

    def test_blank_cells(self, manager):
        assert sorted(manager.cells) == [1, 2, 3, 4, 5, 6]
        assert not any(cell.is_defined for cell in manager.cells.values())
        assert manager.active_cell_id is None

    def test_default_cell_count(self):
        assert len(ArrayManager().cells) == DEFAULT_CONFIG['array_cell_count']

    def test_invalid_cell_count(self):
        with pytest.raises(ValueError):
            ArrayManager(cell_count=0)

    def test_select_and_deselect(self, manager):
        manager.select_cell(4)
        manager.select_cell(2)
        manager.select_cell(4)

        assert [cell.id for cell in manager.selected_cells] == [2, 4]
        assert manager.active_cell_id == 4

        manager.deselect_cell(4)
        assert [cell.id for cell in manager.selected_cells] == [2]
        assert manager.active_cell_id == 2

        manager.clear_selection()
        assert manager.selected_cells == []
        assert manager.active_cell_id is None

    def test_active_cell_after_deselect(self, manager):
        """The lowest selected id becomes active, not the earliest selected"""
        for cell_id in (5, 3, 1):
            manager.select_cell(cell_id)

        manager.deselect_cell(1)

        assert manager.active_cell_id == 3

    def test_unknown_cell(self, manager):
        with pytest.raises(KeyError):
            manager.select_cell(99)


class TestBulkParameters:
    """Test global and local parameter assignment"""

    @pytest.fixture
    def manager(self):
        return ArrayManager(cell_count=6)

    def test_global_then_local(self, manager):
        """Global values alone leave cells incomplete until angles are set"""
        manager.define_global_parameters(**GLOBAL_PARAMETERS)
        assert not manager.cells[1].is_defined

        manager.select_cell(1)
        manager.select_cell(3)
        manager.define_local_parameters(theta=20.0, phi=0.0)

        assert manager.cells[1].is_defined
        assert manager.cells[3].theta == 20.0
        assert not manager.cells[2].is_defined

    def test_local_only_touches_selection(self, manager):
        manager.define_global_parameters(**GLOBAL_PARAMETERS)
        manager.select_cell(5)
        manager.define_local_parameters(theta=0.0, phi=0.0)

        assert [cell.id for cell in manager.cells.values() if cell.is_defined] == [5]


class TestDirectory:
    """Test module and subarray directory operations"""

    @pytest.fixture
    def manager(self):
        manager = ArrayManager(cell_count=6)
        manager.define_global_parameters(**GLOBAL_PARAMETERS)
        for cell_id in manager.cells:
            manager.select_cell(cell_id)
        manager.define_local_parameters(theta=0.0, phi=0.0)
        manager.clear_selection()
        return manager

    def test_selected_cells_into_module(self, manager):
        module = manager.add_module("string A", bypass=True)
        manager.select_cell(3)
        manager.select_cell(1)
        manager.add_selected_cells_to_module("string A")

        assert [cell.id for cell in module.cells] == [1, 3]
        assert manager.cells[1].parent_id == module.id
        assert module.get_voc(1.0) == pytest.approx(2 * manager.cells[1].get_voc(1.0))

    def test_incomplete_selection_rejected(self, manager):
        module = manager.add_module("string A")
        manager.cells[2].T = None
        manager.select_cell(1)
        manager.select_cell(2)

        with pytest.raises(CellIncompleteError):
            manager.add_selected_cells_to_module("string A")
        assert len(module) == 0

    def test_duplicate_and_unknown_names(self, manager):
        manager.add_module("string A")
        with pytest.raises(ValueError):
            manager.add_module("string A")
        with pytest.raises(KeyError):
            manager.module("string B")
        with pytest.raises(KeyError):
            manager.subarray("roof")

    def test_unique_ids(self, manager):
        first = manager.add_module("string A")
        second = manager.add_module("string B")
        subarray = manager.add_subarray("roof")
        assert len({first.id, second.id, subarray.id}) == 3

    def test_subarray_colors(self, manager):
        subarrays = [manager.add_subarray(f"roof {i}") for i in range(len(SUBARRAY_COLORS) + 1)]
        assert subarrays[0].color == SUBARRAY_COLORS[0]
        assert subarrays[-1].color == SUBARRAY_COLORS[0]
        assert manager.add_subarray("wall", color="#123456").color == "#123456"

    def test_module_into_subarray(self, manager):
        module = manager.add_module("string A")
        manager.select_cell(1)
        manager.select_cell(2)
        manager.add_selected_cells_to_module("string A")

        subarray = manager.add_subarray("roof")
        manager.add_module_to_subarray("string A", "roof")

        assert subarray.modules == (module,)
        assert module.parent_id == subarray.id
        np.testing.assert_allclose(subarray.table, module.table, equal_nan=True)

    def test_remove_module(self, manager):
        module = manager.add_module("string A")
        manager.select_cell(1)
        manager.add_selected_cells_to_module("string A")
        subarray = manager.add_subarray("roof")
        manager.add_module_to_subarray("string A", "roof")

        removed = manager.remove_module("string A")

        assert removed is module
        assert "string A" not in manager.modules
        assert len(subarray) == 0
        assert module.parent_id is None
        assert manager.cells[1].parent_id is None

    def test_remove_subarray(self, manager):
        module = manager.add_module("string A")
        manager.add_subarray("roof")
        manager.add_module_to_subarray("string A", "roof")

        manager.remove_subarray("roof")

        assert "roof" not in manager.subarrays
        assert module.parent_id is None
