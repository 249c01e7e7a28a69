"""
BCS 변환 E2E 데모: 3-라운드 데모 프로토콜
==========================================

이 스크립트는 공개 동전 IOP를 BCS 변환으로 비대화식 증명으로 만드는
전체 흐름을 시연한다.

실행:
    python -m zkiop.example

데모 프로토콜 (공개 입력 = 난수 시드):
    라운드 0  prover: 짧은 메시지 1개 (원소 4개)
                      오라클 2개 (길이 256, 국소화 2)
              verifier: 필드 원소 3개 + 16바이트 / 다음 라운드 19비트
    라운드 1  prover: 짧은 메시지 (라운드 0 필드 원소의 제곱 3개)
                      오라클 1개 (길이 256, 값 = 인덱스 + 바이트 챌린지에서 유도한 원소)
    라운드 2  prover: 짧은 메시지 (새 원소 6개)
                      다항식 오라클 (차수 상한 8, 길이 128, 국소화는 LDT가 결정)

    결정 단계는 같은 시드로 prover 메시지를 다시 만들어 비교하고,
    라운드 0은 위치 123/223, 라운드 1은 위치 19/29/39를 질의한다.
    하나라도 다르면 False를 반환한다 (예외 없이 거부).
"""

import logging
import random

from zkiop.bcs.harness import check_commit_phase_correctness
from zkiop.bcs.prover import BCSProof
from zkiop.bcs.verifier import BCSVerifier
from zkiop.domain import Radix2CosetDomain
from zkiop.field import CURVE_ORDER, FR, from_bytes_mod_order
from zkiop.iop.message import Bits, Bytes, FieldElements, ProverRoundMessageInfo
from zkiop.iop.prover import IOPProver
from zkiop.iop.verifier import IOPVerifier, ProtocolPair
from zkiop.ldt.fri import FRIParameters
from zkiop.ldt.rl_ldt import LinearCombinationLDT, LinearCombinationLDTParameters
from zkiop.polynomial import Polynomial
from zkiop.sponge import FieldElementSize, Sha256Sponge

logger = logging.getLogger(__name__)

# 라운드 2 다항식 오라클의 계수
DEMO_POLYNOMIAL_COEFFS = [0x12345, 0x23456, 0x34567, 0x45678, 0x56789]
DEMO_DEGREE_BOUND = 8

ROUND0_QUERIES = [123, 223]
ROUND1_QUERIES = [19, 29, 39]
ROUND2_QUERIES = [1, 2]


def demo_ldt_parameters():
    """데모용 LDT 파라미터: 검사 차수 64, 국소화 [1, 2, 1], 도메인 128."""
    fri = FRIParameters(64, [1, 2, 1], Radix2CosetDomain(128, FR(1)))
    return LinearCombinationLDTParameters(fri, num_queries=1)


def random_elements(rng, count):
    return [FR(rng.randrange(CURVE_ORDER)) for _ in range(count)]


class DemoMessages:
    """시드에서 결정되는 데모 prover 메시지 (prover와 verifier가 같이 쓴다)."""

    def __init__(self, seed):
        rng = random.Random(seed)
        self.round0_short = random_elements(rng, 4)
        self.round0_oracle_a = random_elements(rng, 256)
        self.round0_oracle_b = random_elements(rng, 256)
        self.round2_short = random_elements(rng, 6)

    @staticmethod
    def round1_short(field_challenges):
        return [x * x for x in field_challenges]

    @staticmethod
    def round1_oracle(byte_challenge):
        rhs = from_bytes_mod_order(byte_challenge)
        return [FR(i) + rhs for i in range(256)]


class DemoProver(IOPProver):
    PublicInput = int

    @classmethod
    def prove(cls, namespace, oracle_refs, public_input, private_input,
              transcript, prover_parameter):
        msgs = DemoMessages(public_input)

        transcript.send_short_message(msgs.round0_short)
        transcript.send_oracle_message(msgs.round0_oracle_a, localization=2)
        transcript.send_oracle_message(msgs.round0_oracle_b, localization=2)
        transcript.finalize_prover_round(namespace, "demo round 0")

        field_challenges = transcript.squeeze_field_elements([FieldElementSize.FULL] * 3)
        byte_challenge = transcript.squeeze_bytes(16)
        transcript.finalize_verifier_round(namespace, "demo challenge 0")

        transcript.squeeze_bits(19)
        transcript.finalize_verifier_round(namespace, "demo challenge 1")

        transcript.send_short_message(msgs.round1_short(field_challenges))
        transcript.send_oracle_message(msgs.round1_oracle(byte_challenge))
        transcript.finalize_prover_round(namespace, "demo round 1")

        transcript.send_short_message(msgs.round2_short)
        transcript.send_polynomial_oracle(
            DEMO_DEGREE_BOUND, Polynomial.from_coefficients(DEMO_POLYNOMIAL_COEFFS)
        )
        transcript.finalize_prover_round(namespace, "demo round 2")


class DemoVerifier(IOPVerifier):
    PublicInput = int

    @classmethod
    def register_iop_structure(cls, namespace, transcript, verifier_parameter):
        transcript.receive_prover_round_shape(namespace, ProverRoundMessageInfo(
            num_short_messages=1,
            num_message_oracles=2,
            oracle_length=256,
            localization_parameter=2,
        ), "demo round 0")

        transcript.squeeze_field_elements([FieldElementSize.FULL] * 3)
        transcript.squeeze_bytes(16)
        transcript.finalize_verifier_round(namespace, "demo challenge 0")

        transcript.squeeze_bits(19)
        transcript.finalize_verifier_round(namespace, "demo challenge 1")

        transcript.receive_prover_round_shape(namespace, ProverRoundMessageInfo(
            num_short_messages=1,
            num_message_oracles=1,
            oracle_length=256,
        ), "demo round 1")

        # 국소화는 LDT가 정한다
        transcript.receive_prover_round_shape(namespace, ProverRoundMessageInfo(
            num_short_messages=1,
            oracle_length=128,
            reed_solomon_code_degree_bound=[DEMO_DEGREE_BOUND],
        ), "demo round 2")

    @classmethod
    def query_and_decide(cls, namespace, verifier_parameter, public_input,
                         oracle_refs, sponge, messages):
        msgs = DemoMessages(public_input)

        round0 = messages.prover_round(namespace, 0)
        if round0.get_short_message(0) != msgs.round0_short:
            logger.info("round 0 short message mismatch")
            return False
        expected = [[msgs.round0_oracle_a[p], msgs.round0_oracle_b[p]] for p in ROUND0_QUERIES]
        if round0.query(ROUND0_QUERIES) != expected:
            logger.info("round 0 oracle mismatch")
            return False

        challenge0 = messages.verifier_round(namespace, 0)
        challenge1 = messages.verifier_round(namespace, 1)
        if not (
            len(challenge0) == 2
            and isinstance(challenge0[0], FieldElements) and len(challenge0[0]) == 3
            and isinstance(challenge0[1], Bytes) and len(challenge0[1]) == 16
            and len(challenge1) == 1
            and isinstance(challenge1[0], Bits) and len(challenge1[0]) == 19
        ):
            logger.info("unexpected verifier message shapes")
            return False

        round1 = messages.prover_round(namespace, 1)
        if round1.get_short_message(0) != msgs.round1_short(challenge0[0].value):
            logger.info("round 1 short message mismatch")
            return False
        oracle = msgs.round1_oracle(challenge0[1].value)
        if round1.query(ROUND1_QUERIES) != [[oracle[p]] for p in ROUND1_QUERIES]:
            logger.info("round 1 oracle mismatch")
            return False

        round2 = messages.prover_round(namespace, 2)
        if round2.get_short_message(0) != msgs.round2_short:
            logger.info("round 2 short message mismatch")
            return False
        round2.query(ROUND2_QUERIES)
        return True


def demo_protocol():
    return ProtocolPair(DemoProver, DemoVerifier)


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("  BCS Transform Demo")
    print("  3-라운드 데모 프로토콜 + 선형결합 FRI 저차 테스트")
    print("=" * 60)

    seed = 2024
    pair = demo_protocol()
    ldt_param = demo_ldt_parameters()

    # ── 1. 구조 검사 ──
    print("\n[1] 커밋 단계 구조 검사...")
    transcript, _ = check_commit_phase_correctness(
        pair, LinearCombinationLDT, Sha256Sponge(b"demo"), None, seed, None, ldt_param
    )
    for index, info in enumerate(transcript.prover_round_infos()):
        print(f"    prover 라운드 {index}: {info!r}")
    for index, shapes in enumerate(transcript.verifier_round_shapes()):
        print(f"    verifier 라운드 {index}: {shapes}")

    # ── 2. 증명 생성 ──
    print("\n[2] 증명 생성...")
    proof = BCSProof.generate(
        pair, LinearCombinationLDT, Sha256Sponge(b"demo"), seed, None, None, ldt_param
    )
    print(f"    prover 라운드 수: {proof.num_rounds}")
    print(f"    질의된 코셋 수: {proof.num_queries}")

    # ── 3. 증명 검증 ──
    print("\n[3] 증명 검증...")
    result = BCSVerifier.verify(
        pair, LinearCombinationLDT, Sha256Sponge(b"demo"), proof, seed, None, ldt_param
    )
    print(f"    검증 결과: {'성공 ✓' if result else '실패 ✗'}")

    # ── 4. 조작된 증명 ──
    print("\n[4] 조작된 증명으로 검증 (라운드 0 리프 변조)...")
    proof.rounds[0].leaves[0][0] = proof.rounds[0].leaves[0][0] + FR(1)
    tampered = BCSVerifier.verify(
        pair, LinearCombinationLDT, Sha256Sponge(b"demo"), proof, seed, None, ldt_param
    )
    print(f"    검증 결과: {'성공 ✓' if tampered else '실패 ✗ (예상대로 실패)'}")
    print(f"    사유: {tampered.reason}")

    print("\n" + "=" * 60)
    if result and not tampered:
        print("  데모 완료: 모든 테스트 통과!")
    else:
        print("  데모 완료: 일부 테스트 실패")
    print("=" * 60)


if __name__ == "__main__":
    main()
