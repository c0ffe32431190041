#!/usr/bin/env python3
"""
Series Composites: Module, SubArray, Cluster
============================================

Composite nodes of the array tree. Every composite series-connects an
ordered list of children, so its curve table is the index-aligned sum of
the children's tables. A bypass diode, when present, clips the sum to
non-negative finite voltages at every sample.

- Module:   string of solar cells
- SubArray: one-level aggregation of modules
- Cluster:  any curve node, nested to arbitrary depth

Regeneration is eager. Adding or removing a child, or toggling the bypass
flag, recomposes the table before returning. A composite also records the
revision of every child it was built from and recomposes before answering
a query if any child changed since, so a table is never observed stale.
Children know their parent only through ``parent_id``, which is bookkeeping
and never used to walk the tree.

Partial shading: with a sun position, ``curve`` sums the children's curves
each taken at that child's own effective intensity. Cells mounted at
different angles then contribute unequally, which the single-intensity
table cannot express.
"""

import warnings
import numpy as np
from typing import Iterable, List, Optional, Tuple

from engines.cell import SolarCell
from engines.composition import series_sum, apply_bypass
from engines.exceptions import (
    CompositeIncompleteError, ModuleIncompleteError,
    SubArrayIncompleteError, ClusterIncompleteError,
)
from engines.node import CurveNode
from engines.sampling import intensity_to_row_index


class SeriesComposite(CurveNode):
    """
    Shared composition logic of all series composites.

    Subclasses set ``child_type`` (accepted children) and
    ``strict_composition``. A strict composite raises its incomplete error
    from structural operations as soon as a child is not fully defined. A
    lenient one defers the error to the first query.
    """

    incomplete_error = CompositeIncompleteError
    child_type = CurveNode
    strict_composition = True

    def __init__(self, node_id, bypass: bool = False):
        super().__init__(node_id)
        self._children: List[CurveNode] = []
        self._bypass = bool(bypass)
        self._child_revisions: Tuple[int, ...] = ()

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def children(self) -> Tuple[CurveNode, ...]:
        return tuple(self._children)

    def __len__(self) -> int:
        return len(self._children)

    @property
    def bypass(self) -> bool:
        """True when an ideal bypass diode is connected across the composite"""
        return self._bypass

    @bypass.setter
    def bypass(self, present: bool):
        self._bypass = bool(present)
        self._regenerate(strict=self.strict_composition)

    @property
    def is_defined(self) -> bool:
        return bool(self._children) and all(child.is_defined for child in self._children)

    @property
    def optical_current_max(self) -> float:
        """MPP search bound, taken from the first child"""
        if not self._children:
            raise self.incomplete_error(f"{type(self).__name__} {self.id!r} is empty")
        return self._children[0].optical_current_max

    def iter_nodes(self):
        """Yield this composite and every node below it, depth first"""
        yield self
        for child in self._children:
            if isinstance(child, SeriesComposite):
                yield from child.iter_nodes()
            else:
                yield child

    def _check_child(self, child):
        if not isinstance(child, self.child_type):
            raise TypeError(
                f"{type(self).__name__} accepts {self.child_type.__name__} children, "
                f"got {type(child).__name__}"
            )
        if isinstance(child, SeriesComposite) and any(node is self for node in child.iter_nodes()):
            raise ValueError(f"{type(self).__name__} {self.id!r} cannot contain itself")

    def _attach(self, child):
        if child.parent_id is not None:
            warnings.warn(
                f"{type(child).__name__} {child.id!r} already belongs to {child.parent_id!r}; "
                f"attaching it to {self.id!r} as well will double count it",
                UserWarning,
            )
        child.parent_id = self.id
        self._children.append(child)

    def _insert(self, children: Iterable[CurveNode]):
        children = list(children)
        for child in children:
            self._check_child(child)
        for child in children:
            self._attach(child)
        self._regenerate(strict=self.strict_composition)

    def _remove(self, index: int) -> CurveNode:
        child = self._children.pop(index)
        child.parent_id = None
        self._regenerate(strict=self.strict_composition)
        return child

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def _compose(self, parts: List[np.ndarray]) -> np.ndarray:
        total = series_sum(parts)
        if self._bypass:
            total = apply_bypass(total)
        return total

    def _regenerate(self, strict: bool):
        for child in self._children:
            child._sync()
        self._child_revisions = tuple(child.revision for child in self._children)

        undefined = [child.id for child in self._children if not child.is_defined]
        if not self._children or undefined:
            self._drop_table()
            if strict and undefined:
                raise self.incomplete_error(
                    f"{type(self).__name__} {self.id!r} holds undefined members: {undefined}"
                )
            return

        self._install_table(self._compose([child.table for child in self._children]))

    def _sync(self):
        for child in self._children:
            child._sync()
        revisions = tuple(child.revision for child in self._children)
        if revisions != self._child_revisions:
            self._regenerate(strict=False)

    def _after_import(self):
        self._child_revisions = tuple(child.revision for child in self._children)

    def refresh(self):
        """Recompose now, raising if a member is not fully defined"""
        self._regenerate(strict=True)

    def curve(self, intensity: float,
              sun_zenith: Optional[float] = None,
              sun_azimuth: float = 0.0) -> np.ndarray:
        table = self.table
        if sun_zenith is None:
            return table[intensity_to_row_index(intensity)]
        return self._compose([child.curve(intensity, sun_zenith, sun_azimuth)
                              for child in self._children])


class Module(SeriesComposite):
    """
    Series string of solar cells with an optional bypass diode.

    Every member must be fully defined. Otherwise add/remove/bypass
    operations raise ``ModuleIncompleteError``. The offending cell stays in
    the module, and queries keep raising until the cell is completed.
    """

    incomplete_error = ModuleIncompleteError
    child_type = SolarCell
    strict_composition = True

    def __init__(self, module_id, cells: Iterable[SolarCell] = (), bypass: bool = False):
        super().__init__(module_id, bypass=bypass)
        cells = list(cells)
        if cells:
            self._insert(cells)

    @property
    def cells(self) -> Tuple[SolarCell, ...]:
        return self.children

    def add_cell(self, cell: SolarCell):
        """Append a cell to the end of the string"""
        self._insert([cell])

    def add_cells(self, cells: Iterable[SolarCell]):
        """Append several cells with a single regeneration"""
        self._insert(cells)

    def remove_cell(self, index: int) -> SolarCell:
        """Remove the cell at the given position and return it"""
        return self._remove(index)


class SubArray(SeriesComposite):
    """
    Series aggregation of modules.

    Modules are accepted unconditionally. An empty or incomplete module
    surfaces as ``SubArrayIncompleteError`` when the subarray is queried.
    """

    incomplete_error = SubArrayIncompleteError
    child_type = Module
    strict_composition = False

    def __init__(self, subarray_id, color: Optional[str] = None, bypass: bool = False):
        super().__init__(subarray_id, bypass=bypass)
        self.color = color

    @property
    def modules(self) -> Tuple[Module, ...]:
        return self.children

    def add_module(self, module: Module):
        self._insert([module])

    def remove_module(self, index: int) -> Module:
        return self._remove(index)


class Cluster(SeriesComposite):
    """
    Arbitrarily nested series group of any curve nodes.

    A child must be fully defined at insertion. Otherwise it is rejected
    with ``ClusterIncompleteError`` and not inserted.
    """

    incomplete_error = ClusterIncompleteError
    child_type = CurveNode
    strict_composition = False

    def add(self, node: CurveNode):
        self._check_child(node)
        if not node.is_defined:
            raise ClusterIncompleteError(
                f"{type(node).__name__} {node.id!r} must be fully defined before it joins "
                f"cluster {self.id!r}"
            )
        self._insert([node])

    def remove(self, index: int) -> CurveNode:
        return self._remove(index)
