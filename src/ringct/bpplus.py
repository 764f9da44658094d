"""
Bulletproofs+ inner-product range argument.

A zero-knowledge proof for the relation

    {(H, G, N, Gi, Hi), {C_j}_{j<M} ; {v_j, r_j}_{j<M} |
        0 ≤ v_j < 2^N  and  C_j = v_j·H + r_j·G  for all j}

with N and M powers of two. Supports aggregation (M > 1) and batch
verification with random weights.

This module is the generic engine: it knows nothing about padding,
configuration limits or which generators to pick. ``ringct.rangeproof.bulletplus``
owns that glue and talks to the engine only through prove,
verification_terms and verify.

Mathematical foundation:
    The prover commits to the bit vectors aL (bits of every v_j) and
    aR = aL − 1 in A, then runs a weighted inner-product argument over
    (aL − z·1, aR + d∘y^{NM−i} + z·1) that halves the generator vectors each
    round, emitting (L_k, R_k). Verification collapses into one
    multi-exponentiation that must equal the identity.

References:
    [CHJ+20] H. Chung, K. Han, C. Ju, M. Kim, J.H. Seo, "Bulletproofs+:
             Shorter Proofs for Privacy-Enhanced Distributed Ledger", 2020.
"""

from __future__ import annotations

from dataclasses import dataclass

from ringct.curve import Point, Scalar, multiexp
from ringct.encoding import Reader, Writer
from ringct.hashes import BPPLUS_TRANSCRIPT
from ringct.rng import RandomSource, random_scalar
from ringct.transcript import Transcript
from ringct.zeroize import Zeroizing


def _is_power_of_two(n: int) -> bool:
    return n >= 1 and (n & (n - 1)) == 0


# ==============================================================================
# Statement, witness and proof types
# ==============================================================================


@dataclass(frozen=True)
class RangeParameters:
    """
    Public parameters.

    Attributes:
        H: Value generator.
        G: Blinding generator.
        N: Bits per value (power of two).
        Gi, Hi: Generator vectors, at least N·M long for every statement.
    """
    H: Point
    G: Point
    N: int
    Gi: list[Point]
    Hi: list[Point]

    def __post_init__(self) -> None:
        if not _is_power_of_two(self.N):
            raise ValueError(f"N must be a power of two, got {self.N}")
        if len(self.Gi) != len(self.Hi):
            raise ValueError("Size mismatch for generator vectors Gi and Hi")


@dataclass(frozen=True)
class RangeStatement:
    """
    Commitments to prove in range.

    Attributes:
        params: Public parameters.
        C: Commitments, power-of-two count.
        context: Extra bytes bound into the transcript by the caller.
    """
    params: RangeParameters
    C: list[Point]
    context: bytes = b""

    def __post_init__(self) -> None:
        if not _is_power_of_two(len(self.C)):
            raise ValueError(f"Commitment count must be a power of two, got {len(self.C)}")
        if len(self.params.Gi) < self.M * self.params.N:
            raise ValueError("Not enough generators for this statement")

    @property
    def M(self) -> int:
        return len(self.C)

    @property
    def N(self) -> int:
        return self.params.N


@dataclass
class CommitmentOpening:
    v: int
    r: Scalar


@dataclass
class RangeWitness:
    openings: list[CommitmentOpening]


@dataclass(frozen=True)
class BulletproofPlus:
    """A Bulletproofs+ proof: A, A1, B, r1, s1, d1 plus one (L, R) per round."""
    A: Point
    A1: Point
    B: Point
    r1: Scalar
    s1: Scalar
    d1: Scalar
    L: list[Point]
    R: list[Point]

    @property
    def rounds(self) -> int:
        return len(self.L)

    def write(self, w: Writer) -> None:
        w.point(self.A).point(self.A1).point(self.B)
        w.scalar(self.r1).scalar(self.s1).scalar(self.d1)
        w.points(self.L).points(self.R)

    @classmethod
    def read(cls, r: Reader) -> BulletproofPlus:
        A, A1, B = r.point(), r.point(), r.point()
        r1, s1, d1 = r.scalar(), r.scalar(), r.scalar()
        return cls(A, A1, B, r1, s1, d1, r.points(), r.points())


# ==============================================================================
# Shared helpers
# ==============================================================================


def _start_transcript(statement: RangeStatement) -> Transcript:
    params = statement.params
    nm = statement.N * statement.M
    tr = Transcript(BPPLUS_TRANSCRIPT)
    tr.append_point(b"H", params.H)
    tr.append_point(b"G", params.G)
    tr.append_u64(b"N", statement.N)
    tr.append_u64(b"M", statement.M)
    tr.append_points(b"Gi", params.Gi[:nm])
    tr.append_points(b"Hi", params.Hi[:nm])
    tr.append_message(b"context", statement.context)
    tr.append_points(b"C", statement.C)
    return tr


def _d_vector(z_square: Scalar, N: int, M: int) -> list[Scalar]:
    # d[j·N + i] = z^{2(j+1)} · 2^i
    d = [z_square]
    for i in range(1, N):
        d.append(d[i - 1] * 2)
    for j in range(1, M):
        for i in range(N):
            d.append(d[(j - 1) * N + i] * z_square)
    return d


def _powers(x: Scalar, count: int) -> list[Scalar]:
    out = [Scalar(1)]
    for _ in range(1, count):
        out.append(out[-1] * x)
    return out


# ==============================================================================
# Prover
# ==============================================================================


def prove(
    statement: RangeStatement,
    witness: RangeWitness,
    rng: RandomSource | None = None,
) -> BulletproofPlus:
    """
    Generate a proof.

    Raises:
        ValueError: If the witness does not open the statement or a value
            does not fit in N bits.
    """
    params = statement.params
    M, N = statement.M, statement.N
    NM = N * M
    if len(witness.openings) != M:
        raise ValueError("Witness size does not match statement")
    for j, opening in enumerate(witness.openings):
        if not 0 <= opening.v < (1 << N):
            raise ValueError(f"Value at index {j} is out of range for {N} bits")
        if statement.C[j] != params.H * opening.v + params.G * opening.r:
            raise ValueError("Invalid range statement")

    G, H = params.G, params.H
    Gi, Hi = list(params.Gi[:NM]), list(params.Hi[:NM])
    tr = _start_transcript(statement)

    with Zeroizing() as secrets_:
        aL: list[Scalar] = []
        for opening in witness.openings:
            aL.extend(Scalar((opening.v >> i) & 1) for i in range(N))
        aR = [bit - 1 for bit in aL]
        secrets_.track_all(aL)
        secrets_.track_all(aR)

        alpha = secrets_.track(random_scalar(rng))
        A = multiexp(
            [(alpha, G)]
            + [(aL[i], Gi[i]) for i in range(NM)]
            + [(aR[i], Hi[i]) for i in range(NM)]
        )

        tr.append_point(b"A", A)
        y = tr.challenge_scalar(b"y")
        z = tr.challenge_scalar(b"z")
        z_square = z * z

        y_powers = _powers(y, NM + 2)
        d = _d_vector(z_square, N, M)

        a = secrets_.track_all([aL[i] - z for i in range(NM)])
        b = secrets_.track_all([aR[i] + d[i] * y_powers[NM - i] + z for i in range(NM)])
        alpha1 = secrets_.track(alpha.copy())
        z_even = Scalar(1)
        for opening in witness.openings:
            z_even = z_even * z_square
            alpha1 = secrets_.track(alpha1 + z_even * opening.r * y_powers[NM + 1])

        # Inner-product rounds
        L: list[Point] = []
        R: list[Point] = []
        n = NM
        while n > 1:
            n //= 2
            a1, a2 = a[:n], a[n:]
            b1, b2 = b[:n], b[n:]
            G1, G2 = Gi[:n], Gi[n:]
            H1, H2 = Hi[:n], Hi[n:]
            y_n_inverse = y_powers[n].invert()

            dL = secrets_.track(random_scalar(rng))
            dR = secrets_.track(random_scalar(rng))

            cL = Scalar(0)
            cR = Scalar(0)
            for i in range(n):
                cL = cL + a1[i] * y_powers[i + 1] * b2[i]
                cR = cR + a2[i] * y_powers[n + i + 1] * b1[i]

            L.append(multiexp(
                [(cL, H), (dL, G)]
                + [(a1[i] * y_n_inverse, G2[i]) for i in range(n)]
                + [(b2[i], H1[i]) for i in range(n)]
            ))
            R.append(multiexp(
                [(cR, H), (dR, G)]
                + [(a2[i] * y_powers[n], G1[i]) for i in range(n)]
                + [(b1[i], H2[i]) for i in range(n)]
            ))

            tr.append_point(b"L", L[-1])
            tr.append_point(b"R", R[-1])
            e = tr.challenge_scalar(b"e")
            e_inverse = e.invert()

            Gi = [multiexp([(e_inverse, G1[i]), (e * y_n_inverse, G2[i])]) for i in range(n)]
            Hi = [multiexp([(e, H1[i]), (e_inverse, H2[i])]) for i in range(n)]
            a = secrets_.track_all([a1[i] * e + a2[i] * y_powers[n] * e_inverse for i in range(n)])
            b = secrets_.track_all([b1[i] * e_inverse + b2[i] * e for i in range(n)])
            alpha1 = secrets_.track(dL * e * e + alpha1 + dR * e_inverse * e_inverse)

        # Final round
        r = secrets_.track(random_scalar(rng))
        s = secrets_.track(random_scalar(rng))
        d_ = secrets_.track(random_scalar(rng))
        eta = secrets_.track(random_scalar(rng))
        y1 = y_powers[1]

        A1 = multiexp([
            (r, Gi[0]),
            (s, Hi[0]),
            (r * y1 * b[0] + s * y1 * a[0], H),
            (d_, G),
        ])
        B = multiexp([(r * y1 * s, H), (eta, G)])

        tr.append_point(b"A1", A1)
        tr.append_point(b"B", B)
        e = tr.challenge_scalar(b"e")

        r1 = r + a[0] * e
        s1 = s + b[0] * e
        d1 = eta + d_ * e + alpha1 * e * e

    return BulletproofPlus(A, A1, B, r1, s1, d1, L, R)


# ==============================================================================
# Verifier
# ==============================================================================


def verification_terms(
    statement: RangeStatement,
    proof: BulletproofPlus,
    weight: Scalar,
) -> list[tuple[Scalar, Point]]:
    """
    The proof's verification equation as weighted (scalar, point) terms.

    The proof is valid iff the multi-exponentiation of these terms is the
    identity. Terms from several proofs with independent random weights can
    be summed into one check.

    Raises:
        ValueError: If the proof shape does not match the statement.
    """
    params = statement.params
    M, N = statement.M, statement.N
    NM = N * M
    rounds = proof.rounds
    if len(proof.L) != len(proof.R) or (1 << rounds) != NM:
        raise ValueError("Proof round count does not match statement size")
    if weight.is_zero():
        raise ValueError("Batch weight must be non-zero")

    tr = _start_transcript(statement)
    tr.append_point(b"A", proof.A)
    y = tr.challenge_scalar(b"y")
    z = tr.challenge_scalar(b"z")

    challenges: list[Scalar] = []
    for j in range(rounds):
        tr.append_point(b"L", proof.L[j])
        tr.append_point(b"R", proof.R[j])
        challenges.append(tr.challenge_scalar(b"e"))
    challenges_inv = [c.invert() for c in challenges]
    tr.append_point(b"A1", proof.A1)
    tr.append_point(b"B", proof.B)
    e = tr.challenge_scalar(b"e")

    z_square = z * z
    e_square = e * e
    y_inverse = y.invert()

    y_NM = y
    for _ in range(rounds):
        y_NM = y_NM * y_NM
    y_NM_1 = y_NM * y

    y_sum = Scalar(0)
    y_i = y
    for _ in range(NM):
        y_sum = y_sum + y_i
        y_i = y_i * y

    d = _d_vector(z_square, N, M)
    d_sum = Scalar(0)
    for di in d:
        d_sum = d_sum + di

    # Aggregate the generator scalars
    s = [Scalar(1)]
    for c_inv in challenges_inv:
        s[0] = s[0] * c_inv
    for i in range(1, NM):
        lg_i = i.bit_length() - 1
        k = 1 << lg_i
        s.append(s[i - k] * challenges[rounds - 1 - lg_i] ** 2)

    Gi, Hi = params.Gi[:NM], params.Hi[:NM]
    terms: list[tuple[Scalar, Point]] = []

    y_inv_i = Scalar(1)
    y_NM_i = y_NM
    for i in range(NM):
        g = proof.r1 * e * y_inv_i * s[i]
        h = proof.s1 * e * s[NM - 1 - i]
        terms.append((weight * (g + e_square * z), Gi[i]))
        terms.append((weight * (h - e_square * (d[i] * y_NM_i + z)), Hi[i]))
        y_inv_i = y_inv_i * y_inverse
        y_NM_i = y_NM_i * y_inverse

    z_even = Scalar(1)
    for C_j in statement.C:
        z_even = z_even * z_square
        terms.append((weight * (-e_square * z_even * y_NM_1), C_j))

    h_scalar = proof.r1 * y * proof.s1 + e_square * (y_NM_1 * z * d_sum + (z_square - z) * y_sum)
    terms.append((weight * h_scalar, params.H))
    terms.append((weight * proof.d1, params.G))

    terms.append((weight * -e, proof.A1))
    terms.append((-weight, proof.B))
    terms.append((weight * -e_square, proof.A))
    for j in range(rounds):
        terms.append((weight * (-e_square * challenges[j] ** 2), proof.L[j]))
        terms.append((weight * (-e_square * challenges_inv[j] ** 2), proof.R[j]))

    return terms


def verify(
    statements: list[RangeStatement],
    proofs: list[BulletproofPlus],
    rng: RandomSource | None = None,
) -> bool:
    """
    Batch-verify proofs against their statements with one multi-exponentiation.

    Returns:
        True iff every proof is valid (up to negligible probability).
    """
    if len(statements) != len(proofs):
        raise ValueError("Range statement/proof length mismatch")
    terms: list[tuple[Scalar, Point]] = []
    try:
        for statement, proof in zip(statements, proofs):
            terms.extend(verification_terms(statement, proof, random_scalar(rng)))
    except ValueError:
        return False
    return multiexp(terms).is_identity()
