"""
Direct tests of the numba kernels on small hand-checked arrays.
"""
import numpy as np

from genome_ranges.algebra.kernels import merge_sorted_kernel, nearest_kernel, overlap_pairs_kernel


def _arr(values):
    return np.asarray(values, dtype=np.int64)


def test_merge_sorted_kernel_respects_min_gap():
    starts, ends = _arr([1, 6, 20]), _arr([5, 10, 30])
    s, e = merge_sorted_kernel(starts, ends, 1)
    assert s.tolist() == [1, 20]
    assert e.tolist() == [10, 30]

    s, e = merge_sorted_kernel(starts, ends, 0)
    assert s.tolist() == [1, 6, 20]

    s, e = merge_sorted_kernel(_arr([]), _arr([]), 1)
    assert s.size == 0 and e.size == 0


def test_merge_sorted_kernel_keeps_longest_end():
    s, e = merge_sorted_kernel(_arr([1, 2, 3]), _arr([100, 5, 7]), 1)
    assert s.tolist() == [1]
    assert e.tolist() == [100]


def test_overlap_pairs_kernel_maps_back_to_original_subject_index():
    # subjects sorted by start; original positions 2, 0, 1
    out_q, out_s = overlap_pairs_kernel(
        _arr([4]), _arr([12]),
        _arr([1, 10, 20]), _arr([5, 11, 25]), _arr([2, 0, 1]),
        6,
    )
    assert sorted(zip(out_q.tolist(), out_s.tolist())) == [(0, 0), (0, 2)]


def test_nearest_kernel_skips_matching_ids():
    best, dist = nearest_kernel(
        _arr([1]), _arr([5]), _arr([0]),
        _arr([1, 9]), _arr([5, 9]), _arr([0, 1]),
        True,
    )
    assert best.tolist() == [1]
    assert dist.tolist() == [3]
