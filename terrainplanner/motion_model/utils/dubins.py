# terrainplanner/motion_model/utils/dubins.py
"""
Planar Dubins curves for a vehicle with a minimum turning radius.

A configuration is (x, y, theta) with theta measured counter-clockwise from
the x axis. Word lengths are normalised by the turning radius. Logging is
omitted here as these functions sit on the planning hot path.
"""
import math
from typing import Optional, Sequence, Tuple

from ..constants import DubinsWord, SegmentType, SEGMENT_TYPES, TWO_PI, MotionModelConstants

WordParams = Tuple[float, float, float]

def mod2pi(theta: float) -> float:
    """Wraps an angle to [0, 2pi), folding round-off near 2pi back to zero."""
    wrapped = theta - TWO_PI * math.floor(theta / TWO_PI)
    if wrapped > TWO_PI - MotionModelConstants.ANGLE_EPS:
        return 0.0
    return wrapped

def wrap_pi(theta: float) -> float:
    """Wraps an angle to (-pi, pi]."""
    wrapped = mod2pi(theta)
    return wrapped - TWO_PI if wrapped > math.pi else wrapped

def _intermediate_results(q0: Sequence[float], q1: Sequence[float], rho: float) -> Tuple[float, float, float]:
    dx, dy = q1[0] - q0[0], q1[1] - q0[1]
    d = math.hypot(dx, dy) / rho
    # atan2 is undefined for co-located points
    theta = mod2pi(math.atan2(dy, dx)) if d > 0 else 0.0
    return mod2pi(q0[2] - theta), mod2pi(q1[2] - theta), d

def _lsl(alpha, beta, d) -> Optional[WordParams]:
    sa, sb, ca, cb = math.sin(alpha), math.sin(beta), math.cos(alpha), math.cos(beta)
    p_sq = 2 + d * d - 2 * math.cos(alpha - beta) + 2 * d * (sa - sb)
    if p_sq < 0:
        return None
    tmp = math.atan2(cb - ca, d + sa - sb)
    return mod2pi(tmp - alpha), math.sqrt(p_sq), mod2pi(beta - tmp)

def _rsr(alpha, beta, d) -> Optional[WordParams]:
    sa, sb, ca, cb = math.sin(alpha), math.sin(beta), math.cos(alpha), math.cos(beta)
    p_sq = 2 + d * d - 2 * math.cos(alpha - beta) + 2 * d * (sb - sa)
    if p_sq < 0:
        return None
    tmp = math.atan2(ca - cb, d - sa + sb)
    return mod2pi(alpha - tmp), math.sqrt(p_sq), mod2pi(tmp - beta)

def _lsr(alpha, beta, d) -> Optional[WordParams]:
    sa, sb, ca, cb = math.sin(alpha), math.sin(beta), math.cos(alpha), math.cos(beta)
    p_sq = -2 + d * d + 2 * math.cos(alpha - beta) + 2 * d * (sa + sb)
    if p_sq < 0:
        return None
    p = math.sqrt(p_sq)
    tmp = math.atan2(-ca - cb, d + sa + sb) - math.atan2(-2.0, p)
    return mod2pi(tmp - alpha), p, mod2pi(tmp - beta)

def _rsl(alpha, beta, d) -> Optional[WordParams]:
    sa, sb, ca, cb = math.sin(alpha), math.sin(beta), math.cos(alpha), math.cos(beta)
    p_sq = -2 + d * d + 2 * math.cos(alpha - beta) - 2 * d * (sa + sb)
    if p_sq < 0:
        return None
    p = math.sqrt(p_sq)
    tmp = math.atan2(ca + cb, d - sa - sb) - math.atan2(2.0, p)
    return mod2pi(alpha - tmp), p, mod2pi(beta - tmp)

def _rlr(alpha, beta, d) -> Optional[WordParams]:
    sa, sb, ca, cb = math.sin(alpha), math.sin(beta), math.cos(alpha), math.cos(beta)
    tmp = (6.0 - d * d + 2 * math.cos(alpha - beta) + 2 * d * (sa - sb)) / 8.0
    if abs(tmp) > 1:
        return None
    phi = math.atan2(ca - cb, d - sa + sb)
    p = mod2pi(TWO_PI - math.acos(tmp))
    t = mod2pi(alpha - phi + mod2pi(p / 2.0))
    return t, p, mod2pi(alpha - beta - t + mod2pi(p))

def _lrl(alpha, beta, d) -> Optional[WordParams]:
    sa, sb, ca, cb = math.sin(alpha), math.sin(beta), math.cos(alpha), math.cos(beta)
    tmp = (6.0 - d * d + 2 * math.cos(alpha - beta) + 2 * d * (sb - sa)) / 8.0
    if abs(tmp) > 1:
        return None
    phi = math.atan2(ca - cb, d + sa - sb)
    p = mod2pi(TWO_PI - math.acos(tmp))
    t = mod2pi(-alpha - phi + p / 2.0)
    return t, p, mod2pi(mod2pi(beta) - alpha - t + mod2pi(p))

_WORD_SOLVERS = {
    DubinsWord.LSL: _lsl,
    DubinsWord.LSR: _lsr,
    DubinsWord.RSL: _rsl,
    DubinsWord.RSR: _rsr,
    DubinsWord.RLR: _rlr,
    DubinsWord.LRL: _lrl,
}

def shortest_word(q0: Sequence[float], q1: Sequence[float], rho: float) -> Tuple[DubinsWord, WordParams]:
    """
    Finds the shortest Dubins word between two configurations.

    Returns the word and its three normalised segment lengths. Identical
    configurations yield a zero-length LSL word rather than a full circle.
    """
    alpha, beta, d = _intermediate_results(q0, q1, rho)
    if d < MotionModelConstants.DUBINS_EPS and abs(wrap_pi(q1[2] - q0[2])) < MotionModelConstants.DUBINS_EPS:
        return DubinsWord.LSL, (0.0, 0.0, 0.0)

    best_word, best_params, best_cost = None, None, math.inf
    for word, solver in _WORD_SOLVERS.items():
        params = solver(alpha, beta, d)
        if params is None:
            continue
        cost = sum(params)
        if cost < best_cost:
            best_word, best_params, best_cost = word, params, cost
    # At least one of the CSC words always exists for a positive radius.
    return best_word, best_params

def propagate_segment(t: float, qi: Sequence[float], seg_type: SegmentType) -> Tuple[float, float, float]:
    """Advances a unit-radius configuration along one segment by normalised length t."""
    st, ct = math.sin(qi[2]), math.cos(qi[2])
    if seg_type == SegmentType.LEFT:
        return qi[0] + math.sin(qi[2] + t) - st, qi[1] - math.cos(qi[2] + t) + ct, qi[2] + t
    if seg_type == SegmentType.RIGHT:
        return qi[0] - math.sin(qi[2] - t) + st, qi[1] + math.cos(qi[2] - t) - ct, qi[2] - t
    return qi[0] + ct * t, qi[1] + st * t, qi[2]

def sample_word(q0: Sequence[float], word: DubinsWord, params: WordParams, rho: float, s: float) -> Tuple[float, float, float]:
    """
    Configuration at horizontal arclength s along a word starting at q0.

    The first segment length may exceed 2pi when helical loiter turns were
    inserted; the propagation is periodic so this needs no special handling.
    """
    types = SEGMENT_TYPES[word]
    tprime = max(0.0, s / rho)
    p1, p2 = params[0], params[1]
    qi = (0.0, 0.0, q0[2])
    if tprime < p1:
        q = propagate_segment(tprime, qi, types[0])
    else:
        q1 = propagate_segment(p1, qi, types[0])
        if tprime < p1 + p2:
            q = propagate_segment(tprime - p1, q1, types[1])
        else:
            q2 = propagate_segment(p2, q1, types[1])
            q = propagate_segment(min(tprime - p1 - p2, params[2]), q2, types[2])
    return q[0] * rho + q0[0], q[1] * rho + q0[1], mod2pi(q[2])
