"""
Tests for grid dimensions and the natural cell ordering.
"""

import numpy as np
import pytest

from eclgrid.indexing import GridDimensions, to_ijk_array


class TestGridDimensions:

    def test_area_and_volume(self):
        dims = GridDimensions(3, 4, 5)
        assert dims.area == 12
        assert dims.volume == 60
        assert dims.as_tuple() == (3, 4, 5)
        assert [dims.extent(d) for d in range(3)] == [3, 4, 5]

    @pytest.mark.parametrize("nx,ny,nz", [(0, 1, 1), (1, -2, 1), (1, 1, 0)])
    def test_non_positive_rejected(self, nx, ny, nz):
        with pytest.raises(ValueError):
            GridDimensions(nx, ny, nz)

    def test_frozen(self):
        dims = GridDimensions(1, 1, 1)
        with pytest.raises(AttributeError):
            dims.nx = 2


class TestNaturalOrder:

    def test_index_formula(self):
        dims = GridDimensions(3, 4, 5)
        assert dims.index(0, 0, 0) == 0
        assert dims.index(1, 0, 0) == 1
        assert dims.index(0, 1, 0) == 3
        assert dims.index(0, 0, 1) == 12
        assert dims.index(2, 3, 4) == 59

    def test_index_and_ijk_are_inverse(self):
        dims = GridDimensions(3, 2, 4)
        for idx in range(dims.volume):
            assert dims.index(*dims.ijk(idx)) == idx

    def test_out_of_range(self):
        dims = GridDimensions(2, 2, 2)
        with pytest.raises(IndexError):
            dims.index(2, 0, 0)
        with pytest.raises(IndexError):
            dims.ijk(8)
        with pytest.raises(IndexError):
            dims.ijk(-1)

    def test_cell_coordinates_i_fastest(self):
        dims = GridDimensions(2, 3, 2)
        coords = dims.cell_coordinates()
        assert coords.shape == (12, 3)
        np.testing.assert_array_equal(coords[:4], [[0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0]])
        for idx, (i, j, k) in enumerate(coords):
            assert dims.index(i, j, k) == idx

    def test_to_ijk_array(self):
        dims = GridDimensions(2, 3, 4)
        values = np.arange(dims.volume)
        arr = to_ijk_array(dims, values)
        assert arr.shape == (2, 3, 4)
        assert arr[1, 2, 3] == dims.index(1, 2, 3)
