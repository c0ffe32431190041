#!/usr/bin/env python3
"""
Tests for Curve Table Files
===========================

CSV export and import of node tables.
"""

import pytest
import numpy as np
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import REFERENCE_CELL, TABLE_SHAPE, N_CURRENT_SAMPLES
from engines.cell import SolarCell
from engines.composite import Module
from engines.curve_io import read_curve_table, write_curve_table, default_curve_path
from engines.exceptions import CurveFileError, CellIncompleteError


class TestCurveFiles:
    """Test reading and writing table files"""

    @pytest.fixture
    def cell(self):
        return SolarCell.create("io", **REFERENCE_CELL)

    def test_export_and_read(self, cell, tmp_path):
        """Exported tables read back with masked samples preserved"""
        path = tmp_path / "cell.csv"
        cell.export_table(path)

        table = read_curve_table(path)
        assert table.shape == TABLE_SHAPE
        np.testing.assert_allclose(table, cell.table, rtol=1e-9, equal_nan=True)
        assert "NaN" in path.read_text()

    def test_write_node_directly(self, cell, tmp_path):
        path = tmp_path / "node.csv"
        write_curve_table(cell, path)
        np.testing.assert_allclose(read_curve_table(path), cell.table, rtol=1e-9, equal_nan=True)

    def test_flat_curve(self, cell, tmp_path):
        """A single row of samples reads back as a flat curve"""
        path = tmp_path / "curve.csv"
        write_curve_table(cell.curve(1.0), path)

        curve = read_curve_table(path)
        assert curve.shape == (N_CURRENT_SAMPLES,)
        np.testing.assert_allclose(curve, cell.curve(1.0), rtol=1e-9, equal_nan=True)

    def test_nested_directory_created(self, cell, tmp_path):
        path = tmp_path / "CurveData" / "nested" / "cell.csv"
        cell.export_table(path)
        assert path.exists()

    def test_default_path(self):
        assert default_curve_path(3) == os.path.join("CurveData", "3.csv")
        assert default_curve_path("m", "out") == os.path.join("out", "m.csv")

    def test_wrong_column_count(self, tmp_path):
        with pytest.raises(CurveFileError):
            write_curve_table(np.zeros((3, 10)), tmp_path / "bad.csv")

    def test_bad_shape(self, tmp_path):
        path = tmp_path / "short.csv"
        np.savetxt(path, np.zeros((3, N_CURRENT_SAMPLES)), delimiter=",")
        with pytest.raises(CurveFileError):
            read_curve_table(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CurveFileError) as info:
            read_curve_table(tmp_path / "missing.csv")
        assert isinstance(info.value, OSError)

    def test_non_numeric(self, tmp_path):
        path = tmp_path / "text.csv"
        path.write_text("a,b,c\n1,2,3\n")
        with pytest.raises(CurveFileError):
            read_curve_table(path)


class TestNodeImport:
    """Test replacing a node table from a file"""

    @pytest.fixture
    def cell(self):
        return SolarCell.create("io", **REFERENCE_CELL)

    def test_import_replaces_table(self, cell, tmp_path):
        path = tmp_path / "hot.csv"
        SolarCell.create("hot", **{**REFERENCE_CELL, 'T': 350.0}).export_table(path)
        revision = cell.revision

        cell.import_table(path)

        assert cell.revision == revision + 1
        assert cell.get_voc(1.0) > SolarCell.create("ref", **REFERENCE_CELL).get_voc(1.0)

    def test_parameter_write_regenerates_after_import(self, cell, tmp_path):
        path = tmp_path / "hot.csv"
        SolarCell.create("hot", **{**REFERENCE_CELL, 'T': 350.0}).export_table(path)
        cell.import_table(path)

        cell.T = 303.0
        expected = SolarCell.create("ref", **REFERENCE_CELL)
        np.testing.assert_array_equal(cell.table, expected.table)

    def test_failed_import_leaves_table(self, cell, tmp_path):
        before = cell.table.copy()
        path = tmp_path / "curve.csv"
        write_curve_table(cell.curve(1.0), path)

        with pytest.raises(CurveFileError):
            cell.import_table(path)
        with pytest.raises(CurveFileError):
            cell.import_table(tmp_path / "missing.csv")
        np.testing.assert_array_equal(cell.table, before)

    def test_import_requires_definition(self, cell, tmp_path):
        path = tmp_path / "cell.csv"
        cell.export_table(path)

        with pytest.raises(CellIncompleteError):
            SolarCell("blank").import_table(path)

    def test_module_import_survives_until_change(self, tmp_path):
        """An imported module table is kept until a member changes"""
        cells = [SolarCell.create("a", **REFERENCE_CELL), SolarCell.create("b", **REFERENCE_CELL)]
        module = Module("m", cells=cells)
        generated = module.table.copy()

        path = tmp_path / "single.csv"
        cells[0].export_table(path)
        module.import_table(path)
        np.testing.assert_allclose(module.table, cells[0].table, rtol=1e-9, equal_nan=True)

        cells[1].T = 303.0
        np.testing.assert_allclose(module.table, generated, equal_nan=True)
