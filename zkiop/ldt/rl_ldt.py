"""
무작위 선형결합 LDT (Linear Combination LDT)
=============================================

트랜스크립트의 모든 RS 오라클을 하나의 코드워드로 묶어 FRI 한 번으로
저차 테스트를 수행한다.

**커밋 단계**:
  1. RS 오라클마다 무작위 계수 cᵢ를 squeeze (verifier 라운드 0)
  2. 차수 보정 후 선형결합
       g(x) = Σᵢ cᵢ · x^{D - dᵢ} · fᵢ(x)      (D = tested_degree, dᵢ = 차수 상한)
     fᵢ의 차수가 dᵢ 이하이면 g의 차수는 D 이하이다.
     g는 커밋하지 않는다. verifier가 RS 오라클 질의로 직접 계산한다.
  3. FRI 접기 단계마다 α를 squeeze (verifier 라운드 1..r)
     마지막 단계가 아니면 접힌 레이어를 오라클로 커밋하고,
     마지막 단계에서는 최종 다항식 계수를 짧은 메시지로 보낸다.

**질의 단계**:
  num_queries번 log₂N 비트를 squeeze하여 위치를 정하고, 레이어마다
    - 코셋을 질의해 접기 결과를 계산
    - 다음 레이어의 같은 위치 값과 비교
  마지막으로 최종 다항식의 평가값과 비교한다.
  어느 하나라도 다르면 False (거부).

사용 예시:
    >>> fri = FRIParameters(64, [1, 2, 1], Radix2CosetDomain(128, FR(1)))
    >>> param = LinearCombinationLDTParameters(fri, num_queries=1)
    >>> LinearCombinationLDT.codeword_domain(param).size   # 128
"""

import logging

from zkiop.errors import StructureMismatch
from zkiop.field import FR
from zkiop.iop.message import ProverRoundMessageInfo
from zkiop.ldt import LDT
from zkiop.ldt.fri import fold_coset, fold_layer
from zkiop.polynomial import Polynomial, interpolate_at
from zkiop.sponge import FieldElementSize

logger = logging.getLogger(__name__)


class LinearCombinationLDTParameters:
    """속성:
        fri_parameters: FRIParameters
        num_queries: 질의 반복 횟수
    """

    def __init__(self, fri_parameters, num_queries):
        if num_queries < 1:
            raise ValueError(f"질의 횟수는 1 이상이어야 합니다: {num_queries}")
        self.fri_parameters = fri_parameters
        self.num_queries = num_queries

    def __repr__(self):
        return (
            f"LinearCombinationLDTParameters({self.fri_parameters!r}, "
            f"num_queries={self.num_queries})"
        )


def _collect_degree_bounds(messages, codewords, tested_degree):
    bounds = []
    for ref in codewords:
        bounds.extend(messages.prover_round_by_ref(ref).info.reed_solomon_code_degree_bound)
    for bound in bounds:
        if bound > tested_degree:
            raise StructureMismatch(
                f"차수 상한 {bound}가 LDT 검사 차수 {tested_degree}를 넘습니다",
                data={"degree_bound": bound, "tested_degree": tested_degree},
            )
    return bounds


def _query_positions(sponge, num_queries, log_size):
    positions = []
    for _ in range(num_queries):
        bits = sponge.squeeze_bits(log_size)
        positions.append(sum(1 << k for k, bit in enumerate(bits) if bit))
    return positions


class LinearCombinationLDT(LDT):
    """무작위 선형결합 + FRI 저차 테스트."""

    @classmethod
    def codeword_domain(cls, param):
        return param.fri_parameters.domain

    @classmethod
    def localization_param(cls, param):
        return param.fri_parameters.localization_parameters[0]

    @classmethod
    def prove(cls, namespace, param, transcript, codewords):
        fri = param.fri_parameters
        bounds = _collect_degree_bounds(transcript.messages, codewords, fri.tested_degree)
        if not bounds:
            logger.debug("no reed-solomon oracles, skipping low-degree test")
            return

        coeffs = transcript.squeeze_field_elements([FieldElementSize.FULL] * len(bounds))
        transcript.finalize_verifier_round(namespace, "ldt random coefficients")

        domain = fri.domain
        xs = domain.elements()
        combined = [FR(0)] * domain.size
        k = 0
        for ref in codewords:
            for codeword in transcript.messages.prover_round_by_ref(ref).reed_solomon_codewords:
                shift = fri.tested_degree - bounds[k]
                for i in range(domain.size):
                    combined[i] = combined[i] + coeffs[k] * xs[i] ** shift * codeword[i]
                k += 1

        domains = fri.layer_domains()
        locs = fri.localization_parameters
        current = combined
        for i, l in enumerate(locs):
            alpha, = transcript.squeeze_field_elements([FieldElementSize.FULL])
            transcript.finalize_verifier_round(namespace, f"fri alpha {i}")
            current = fold_layer(current, domains[i], l, alpha)
            if i + 1 < len(locs):
                transcript.send_oracle_message(current, localization=locs[i + 1])
                transcript.finalize_prover_round(namespace, f"fri layer {i + 1}")
            else:
                n = fri.final_poly_num_coeffs
                final_coeffs = domains[i + 1].interpolate(current).coeffs
                final_coeffs = (final_coeffs + [FR(0)] * n)[:n]
                transcript.send_short_message(final_coeffs)
                transcript.finalize_prover_round(namespace, "fri final polynomial")
        logger.debug("ldt committed %d codewords in %d fri rounds", len(bounds), len(locs))

    @classmethod
    def register_iop_structure(cls, namespace, param, transcript, codewords):
        fri = param.fri_parameters
        bounds = _collect_degree_bounds(transcript.messages, codewords, fri.tested_degree)
        if not bounds:
            return

        transcript.squeeze_field_elements([FieldElementSize.FULL] * len(bounds))
        transcript.finalize_verifier_round(namespace, "ldt random coefficients")

        domains = fri.layer_domains()
        locs = fri.localization_parameters
        for i in range(len(locs)):
            transcript.squeeze_field_elements([FieldElementSize.FULL])
            transcript.finalize_verifier_round(namespace, f"fri alpha {i}")
            if i + 1 < len(locs):
                info = ProverRoundMessageInfo(
                    num_message_oracles=1,
                    oracle_length=domains[i + 1].size,
                    localization_parameter=locs[i + 1],
                )
            else:
                info = ProverRoundMessageInfo(num_short_messages=1)
            transcript.receive_prover_round_shape(namespace, info, f"fri round {i}")

    @classmethod
    def query_and_decide(cls, namespace, param, sponge, codewords, messages):
        """질의하고 모든 레이어의 일관성을 검사한다.

        Returns:
            bool: 모든 질의가 일관되면 True
        """
        fri = param.fri_parameters
        bounds = _collect_degree_bounds(messages, codewords, fri.tested_degree)
        if not bounds:
            return True

        locs = fri.localization_parameters
        coeffs = messages.verifier_round(namespace, 0)[0].value
        alphas = [messages.verifier_round(namespace, i + 1)[0].value[0] for i in range(len(locs))]
        final_message = messages.prover_round(namespace, len(locs) - 1).get_short_message(0)
        if len(final_message) != fri.final_poly_num_coeffs:
            logger.info(
                "final polynomial has %d coefficients, expected %d",
                len(final_message), fri.final_poly_num_coeffs,
            )
            return False
        final_poly = Polynomial(final_message)

        domains = fri.layer_domains()
        rs_rounds = [messages.prover_round_by_ref(ref) for ref in codewords]
        positions = _query_positions(sponge, param.num_queries, domains[0].log_size)

        for position in positions:
            # 레이어 0: RS 오라클 질의로 선형결합을 계산하고 접는다
            l0 = locs[0]
            c = position % domains[0].num_cosets(l0)
            xs = domains[0].coset_elements(c, l0)
            combined = [FR(0)] * len(xs)
            k = 0
            for oracle in rs_rounds:
                answer = oracle.query_coset([c])[0]
                for values in answer[:oracle.info.num_reed_solomon_codes]:
                    shift = fri.tested_degree - bounds[k]
                    for j, x in enumerate(xs):
                        combined[j] = combined[j] + coeffs[k] * x ** shift * values[j]
                    k += 1
            folded = interpolate_at(xs, combined, alphas[0])
            position = c

            for i in range(1, len(locs)):
                domain = domains[i]
                m = domain.num_cosets(locs[i])
                c, j = position % m, position // m
                values = messages.prover_round(namespace, i - 1).query_coset([c])[0][0]
                if values[j] != folded:
                    logger.info("fri layer %d inconsistent at position %d", i, position)
                    return False
                folded = fold_coset(domain, locs[i], c, values, alphas[i])
                position = c

            if final_poly.evaluate(domains[-1].element(position)) != folded:
                logger.info("fri final polynomial mismatch at position %d", position)
                return False
        return True
