"""
FRI folding and linear-combination low-degree test
"""
import random

import pytest

from zkiop.bcs.prover import BCSProof
from zkiop.bcs.transcript import Transcript
from zkiop.domain import Radix2CosetDomain
from zkiop.errors import StructureMismatch
from zkiop.example import demo_ldt_parameters, demo_protocol
from zkiop.field import FR
from zkiop.ldt import NoLDT
from zkiop.ldt.fri import FRIParameters, fold_coset, fold_layer
from zkiop.ldt.rl_ldt import LinearCombinationLDT, LinearCombinationLDTParameters
from zkiop.polynomial import Polynomial
from zkiop.sponge import Sha256Sponge


def _small_params(num_queries=8):
    fri = FRIParameters(15, [1, 1], Radix2CosetDomain(32, FR(7)))
    return LinearCombinationLDTParameters(fri, num_queries=num_queries)


def _commit_rs_round(param, degree_bound, polynomial, corrupt=False):
    """RS 오라클 하나를 보낸 뒤 LDT 커밋 단계까지 실행한다."""
    transcript = Transcript(
        Sha256Sponge(b"fri"),
        None,
        LinearCombinationLDT.codeword_domain(param),
        LinearCombinationLDT.localization_param(param),
    )
    transcript.send_polynomial_oracle(degree_bound, polynomial)
    if corrupt:
        rng = random.Random(1)
        size = len(transcript._rs_codewords[0])
        transcript._rs_codewords[0] = [FR(rng.randrange(1 << 64)) for _ in range(size)]
    transcript.finalize_prover_round(transcript.root)
    codewords = transcript.messages.rounds_with_degree_bounds()
    namespace = transcript.new_namespace(transcript.root, "ldt")
    LinearCombinationLDT.prove(namespace, param, transcript, codewords)
    transcript.messages.freeze()
    return transcript, namespace, codewords


# =====================================================================
# FRI 파라미터
# =====================================================================

class TestFRIParameters:
    def test_demo_parameters(self):
        fri = demo_ldt_parameters().fri_parameters
        assert fri.num_rounds == 3
        assert fri.final_poly_num_coeffs == 5
        assert [d.size for d in fri.layer_domains()] == [128, 64, 16, 8]
        assert fri.final_domain.size == 8

    def test_invalid_parameters(self):
        domain = Radix2CosetDomain(16)
        with pytest.raises(ValueError):
            FRIParameters(7, [1], "not a domain")
        with pytest.raises(ValueError):
            FRIParameters(7, [], domain)
        with pytest.raises(ValueError):
            FRIParameters(7, [0, 1], domain)
        with pytest.raises(ValueError):
            FRIParameters(7, [2, 3], domain)
        with pytest.raises(ValueError):
            FRIParameters(16, [1], domain)
        with pytest.raises(ValueError):
            LinearCombinationLDTParameters(FRIParameters(7, [1], domain), num_queries=0)

    def test_ldt_domain_and_localization(self):
        param = demo_ldt_parameters()
        assert LinearCombinationLDT.codeword_domain(param).size == 128
        assert LinearCombinationLDT.localization_param(param) == 1


# =====================================================================
# 접기
# =====================================================================

class TestFolding:
    def test_fold_layer_splits_even_and_odd_parts(self):
        domain = Radix2CosetDomain(16, FR(3))
        coeffs = [FR(c) for c in (4, 8, 15, 16, 23, 42)]
        alpha = FR(11)
        folded = fold_layer(domain.evaluate(Polynomial(coeffs)), domain, 1, alpha)

        even, odd = coeffs[0::2], coeffs[1::2]
        expected = Polynomial([e + alpha * o for e, o in zip(even, odd)])
        assert folded == domain.fold(1).evaluate(expected)

    def test_fold_coset_matches_layer(self):
        domain = Radix2CosetDomain(16, FR(5))
        values = domain.evaluate(Polynomial([FR(i + 1) for i in range(7)]))
        alpha = FR(9)
        folded = fold_layer(values, domain, 2, alpha)
        assert len(folded) == 4
        for c in range(4):
            coset = [values[p] for p in domain.coset_positions(c, 2)]
            assert fold_coset(domain, 2, c, coset, alpha) == folded[c]

    def test_fold_reduces_degree(self):
        domain = Radix2CosetDomain(16, FR(3))
        poly = Polynomial([FR(i + 2) for i in range(8)])
        folded = fold_layer(domain.evaluate(poly), domain, 2, FR(6))
        assert domain.fold(2).interpolate(folded).degree <= 1

    def test_fold_layer_length_check(self):
        with pytest.raises(ValueError):
            fold_layer([FR(1)] * 8, Radix2CosetDomain(16), 1, FR(2))


# =====================================================================
# 선형결합 LDT
# =====================================================================

class TestLinearCombinationLDT:
    POLY = Polynomial([FR(5), FR(1), FR(2), FR(9)])

    def test_round_layout(self):
        param = _small_params()
        transcript, namespace, _ = _commit_rs_round(param, 8, self.POLY)
        assert transcript.messages.num_verifier_rounds(namespace) == 3
        assert transcript.messages.num_prover_rounds(namespace) == 2
        final = transcript.messages.prover_round(namespace, 1).get_short_message(0)
        assert len(final) == 4

    def test_low_degree_codeword_passes(self):
        param = _small_params()
        transcript, namespace, codewords = _commit_rs_round(param, 8, self.POLY)
        assert LinearCombinationLDT.query_and_decide(
            namespace, param, transcript.sponge, codewords, transcript.messages
        )

    def test_corrupted_codeword_is_rejected(self):
        param = _small_params()
        transcript, namespace, codewords = _commit_rs_round(param, 8, self.POLY, corrupt=True)
        assert not LinearCombinationLDT.query_and_decide(
            namespace, param, transcript.sponge, codewords, transcript.messages
        )

    def test_degree_bound_above_tested_degree(self):
        with pytest.raises(StructureMismatch):
            _commit_rs_round(_small_params(), 20, self.POLY)

    def test_no_reed_solomon_rounds(self):
        param = _small_params()
        transcript = Transcript(Sha256Sponge(), None, param.fri_parameters.domain, 1)
        namespace = transcript.new_namespace(transcript.root, "ldt")
        LinearCombinationLDT.prove(namespace, param, transcript, [])
        assert transcript.messages.num_verifier_rounds(namespace) == 0
        assert LinearCombinationLDT.query_and_decide(
            namespace, param, transcript.sponge, [], transcript.messages
        )


class TestNoLDT:
    def test_no_domain(self):
        assert NoLDT.codeword_domain(None) is None
        assert NoLDT.localization_param(None) is None

    def test_rejects_reed_solomon_rounds(self):
        param = _small_params()
        transcript, _, codewords = _commit_rs_round(param, 8, Polynomial([FR(1)]))
        with pytest.raises(StructureMismatch):
            NoLDT.prove(transcript.root, None, transcript, codewords)
        with pytest.raises(StructureMismatch):
            NoLDT.query_and_decide(transcript.root, None, None, codewords, transcript.messages)
        assert NoLDT.query_and_decide(transcript.root, None, None, [], transcript.messages)

    def test_polynomial_oracle_needs_ldt_domain(self):
        with pytest.raises(StructureMismatch):
            BCSProof.generate(
                demo_protocol(), NoLDT, Sha256Sponge(), 1, None, None, None,
            )
