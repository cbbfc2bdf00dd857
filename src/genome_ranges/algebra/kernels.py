import numpy as np
import numba as nb


# -------------------------
# Merge Kernel
# -------------------------
@nb.njit(cache=False)
def merge_sorted_kernel(starts: np.ndarray, ends: np.ndarray, min_gap: int):
    """
    Merges start-sorted intervals in a single O(N) pass.

    Two neighbouring intervals are merged when the gap between them is
    narrower than `min_gap`, i.e. when `next.start <= current.end + min_gap`.
    With `min_gap=1` overlapping and adjacent (book-ended) intervals merge.

    Parameters
    ----------
    starts : np.ndarray
        int64 starts, sorted ascending.
    ends : np.ndarray
        int64 ends matching `starts`.
    min_gap : int
        Minimum gap width that keeps two intervals apart.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        Starts and ends of the merged intervals.
    """
    n = starts.shape[0]
    out_s = np.empty(n, dtype=np.int64)
    out_e = np.empty(n, dtype=np.int64)
    if n == 0:
        return out_s, out_e

    curr_s = starts[0]
    curr_e = ends[0]
    out_idx = 0

    for i in range(1, n):
        s = starts[i]
        e = ends[i]
        if s <= curr_e + min_gap:
            if e > curr_e:
                curr_e = e
        else:
            out_s[out_idx] = curr_s
            out_e[out_idx] = curr_e
            out_idx += 1
            curr_s = s
            curr_e = e

    out_s[out_idx] = curr_s
    out_e[out_idx] = curr_e
    out_idx += 1

    return out_s[:out_idx], out_e[:out_idx]


# -------------------------
# Overlap Kernel
# -------------------------
@nb.njit(cache=False)
def overlap_pairs_kernel(
    q_starts: np.ndarray, q_ends: np.ndarray,
    s_starts: np.ndarray, s_ends: np.ndarray, s_index: np.ndarray,
    max_width: int,
):
    """
    Finds every (query, subject) pair satisfying `s.start <= q.end and s.end >= q.start`.

    Subjects must be sorted by start; `s_index` maps each sorted subject back
    to its original position. For each query a binary search bounds the
    candidates on the right and `max_width` bounds the backward scan on the
    left. Results are produced with the usual two-pass count-then-fill.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        Query indices and original subject indices of all hits, grouped by
        query but not sorted by subject.
    """
    n_q = q_starts.shape[0]
    limits = np.searchsorted(s_starts, q_ends, side="right")

    # Pass 1: count hits
    total = 0
    for q in range(n_q):
        q_start = q_starts[q]
        for t in range(limits[q] - 1, -1, -1):
            if s_starts[t] + max_width - 1 < q_start:
                break
            if s_ends[t] >= q_start:
                total += 1

    # Pass 2: fill
    out_q = np.empty(total, dtype=np.int64)
    out_s = np.empty(total, dtype=np.int64)
    idx = 0
    for q in range(n_q):
        q_start = q_starts[q]
        for t in range(limits[q] - 1, -1, -1):
            if s_starts[t] + max_width - 1 < q_start:
                break
            if s_ends[t] >= q_start:
                out_q[idx] = q
                out_s[idx] = s_index[t]
                idx += 1

    return out_q, out_s


# -------------------------
# Nearest Kernel
# -------------------------
@nb.njit(cache=False)
def nearest_kernel(
    q_starts: np.ndarray, q_ends: np.ndarray, q_ids: np.ndarray,
    s_starts: np.ndarray, s_ends: np.ndarray, s_ids: np.ndarray,
    exclude_same_id: bool,
):
    """
    Finds, for each query, the subject at minimum distance.

    Distance is `max(0, max(starts) - min(ends) - 1)`, so overlapping and
    adjacent ranges are at distance 0. Ties go to the lowest subject start,
    then the lowest subject index.

    Parameters
    ----------
    q_ids, s_ids : np.ndarray
        Identifiers of queries and subjects, compared when `exclude_same_id` is set.
    exclude_same_id : bool
        Skip a subject whose id equals the query id (self-search).

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        Position of the best subject in the subject arrays per query (-1 if none) and the matching distance
        (-1 if none).
    """
    n_q = q_starts.shape[0]
    n_s = s_starts.shape[0]
    best_idx = np.full(n_q, -1, dtype=np.int64)
    best_dist = np.full(n_q, -1, dtype=np.int64)

    for q in range(n_q):
        qs = q_starts[q]
        qe = q_ends[q]
        found = False
        d_best = 0
        start_best = 0
        for j in range(n_s):
            if exclude_same_id and s_ids[j] == q_ids[q]:
                continue
            lo = qs if qs > s_starts[j] else s_starts[j]
            hi = qe if qe < s_ends[j] else s_ends[j]
            d = lo - hi - 1
            if d < 0:
                d = 0
            if (not found) or d < d_best or (d == d_best and s_starts[j] < start_best):
                found = True
                d_best = d
                start_best = s_starts[j]
                best_idx[q] = j
        if found:
            best_dist[q] = d_best

    return best_idx, best_dist
