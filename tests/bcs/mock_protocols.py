"""
테스트용 IOP 프로토콜
======================

  - NestedProver / NestedVerifier: 하위 프로토콜을 자식 네임스페이스에서
    호출하고, 하위 프로토콜이 바깥 라운드를 오라클 참조로 질의한다.
  - SubProver / SubVerifier: OracleRefs = MsgRoundRef 인 하위 프로토콜
    (최상위로는 쓸 수 없다)
  - BrokenShapeVerifier / ExtraSqueezeVerifier / WrongLengthVerifier /
    WrongDegreeBoundVerifier / MissingRoundVerifier:
    데모 프로토콜과 형태 선언이 어긋난 verifier
"""

from zkiop.domain import Radix2CosetDomain
from zkiop.example import DEMO_DEGREE_BOUND, DemoVerifier
from zkiop.field import FR
from zkiop.iop.message import MsgRoundRef, ProverRoundMessageInfo
from zkiop.iop.prover import IOPProver, ProverParam
from zkiop.iop.verifier import IOPVerifier, VerifierParam
from zkiop.ldt.fri import FRIParameters
from zkiop.ldt.rl_ldt import LinearCombinationLDTParameters
from zkiop.polynomial import Polynomial
from zkiop.sponge import FieldElementSize


OUTER_ORACLE_LENGTH = 16
SUB_ORACLE_LENGTH = 16
NESTED_DEGREE_BOUND = 8


def nested_ldt_parameters():
    fri = FRIParameters(15, [1, 1], Radix2CosetDomain(32, FR(7)))
    return LinearCombinationLDTParameters(fri, num_queries=2)


# ─────────────────────────────────────────────────────────────────────
# 하위 프로토콜
# ─────────────────────────────────────────────────────────────────────

class SubVerifierParam(VerifierParam):
    def __init__(self, offset):
        self.offset = offset


class SubProverParam(ProverParam):
    VerifierParameter = SubVerifierParam

    def __init__(self, offset):
        self.offset = offset

    def to_verifier_param(self):
        return SubVerifierParam(self.offset)


class SubProver(IOPProver):
    """바깥 라운드의 짧은 메시지 합 s를 보내고, [i + s + offset] 오라클을 커밋한다."""

    ProverParameter = SubProverParam
    RoundOracleRefs = MsgRoundRef
    PublicInput = int

    @classmethod
    def prove(cls, namespace, oracle_refs, public_input, private_input,
              transcript, prover_parameter):
        outer = transcript.messages.prover_round_by_ref(oracle_refs)
        s = sum(outer.get_short_message(0), FR(0))
        transcript.send_short_message([s])
        transcript.send_oracle_message(
            [FR(i) + s + FR(prover_parameter.offset) for i in range(SUB_ORACLE_LENGTH)],
            localization=1,
        )
        transcript.finalize_prover_round(namespace, "sub round 0")
        transcript.squeeze_field_elements([FieldElementSize.FULL])
        transcript.finalize_verifier_round(namespace, "sub challenge 0")


class SubVerifier(IOPVerifier):
    VerifierParameter = SubVerifierParam
    OracleRefs = MsgRoundRef
    PublicInput = int

    @classmethod
    def register_iop_structure(cls, namespace, transcript, verifier_parameter):
        transcript.receive_prover_round_shape(namespace, ProverRoundMessageInfo(
            num_short_messages=1,
            num_message_oracles=1,
            oracle_length=SUB_ORACLE_LENGTH,
            localization_parameter=1,
        ), "sub round 0")
        transcript.squeeze_field_elements([FieldElementSize.FULL])
        transcript.finalize_verifier_round(namespace, "sub challenge 0")

    @classmethod
    def query_and_decide(cls, namespace, verifier_parameter, public_input,
                         oracle_refs, sponge, messages):
        outer = messages.prover_round_by_ref(oracle_refs)
        s = sum(outer.get_short_message(0), FR(0))
        own = messages.prover_round(namespace, 0)
        if own.get_short_message(0) != [s]:
            return False

        bits = sponge.squeeze_bits(4)
        position = sum(1 << k for k, bit in enumerate(bits) if bit)
        expected = FR(position) + s + FR(verifier_parameter.offset)
        if own.query([position]) != [[expected]]:
            return False
        # 바깥 라운드의 오라클도 참조로 질의한다
        return outer.query([position]) == [[FR(3 * position)]]


# ─────────────────────────────────────────────────────────────────────
# 하위 프로토콜을 호출하는 최상위 프로토콜
# ─────────────────────────────────────────────────────────────────────

class NestedVerifierParam(VerifierParam):
    def __init__(self, sub):
        self.sub = sub


class NestedProverParam(ProverParam):
    VerifierParameter = NestedVerifierParam

    def __init__(self, sub):
        self.sub = sub

    def to_verifier_param(self):
        return NestedVerifierParam(self.sub.to_verifier_param())


class NestedProver(IOPProver):
    ProverParameter = NestedProverParam
    PublicInput = int

    @classmethod
    def prove(cls, namespace, oracle_refs, public_input, private_input,
              transcript, prover_parameter):
        transcript.send_short_message([FR(public_input), FR(public_input + 1)])
        transcript.send_oracle_message([FR(3 * i) for i in range(OUTER_ORACLE_LENGTH)])
        transcript.finalize_prover_round(namespace, "outer round 0")
        transcript.squeeze_bytes(8)
        transcript.finalize_verifier_round(namespace, "outer challenge 0")

        sub_namespace = transcript.new_namespace(namespace, "sub")
        SubProver.prove(
            sub_namespace, MsgRoundRef(namespace, 0), public_input, None,
            transcript, prover_parameter.sub,
        )

        transcript.squeeze_bits(5)
        transcript.finalize_verifier_round(namespace, "outer challenge 1")
        transcript.send_short_message([FR(2 * public_input)])
        transcript.send_polynomial_oracle(
            NESTED_DEGREE_BOUND, Polynomial([FR(public_input), FR(1), FR(2)])
        )
        transcript.finalize_prover_round(namespace, "outer round 1")


class NestedVerifier(IOPVerifier):
    VerifierParameter = NestedVerifierParam
    PublicInput = int

    @classmethod
    def register_iop_structure(cls, namespace, transcript, verifier_parameter):
        transcript.receive_prover_round_shape(namespace, ProverRoundMessageInfo(
            num_short_messages=1,
            num_message_oracles=1,
            oracle_length=OUTER_ORACLE_LENGTH,
        ), "outer round 0")
        transcript.squeeze_bytes(8)
        transcript.finalize_verifier_round(namespace, "outer challenge 0")

        sub_namespace = transcript.new_namespace(namespace, "sub")
        SubVerifier.register_iop_structure(sub_namespace, transcript, verifier_parameter.sub)

        transcript.squeeze_bits(5)
        transcript.finalize_verifier_round(namespace, "outer challenge 1")
        transcript.receive_prover_round_shape(namespace, ProverRoundMessageInfo(
            num_short_messages=1,
            oracle_length=transcript.ldt_codeword_domain.size,
            reed_solomon_code_degree_bound=[NESTED_DEGREE_BOUND],
        ), "outer round 1")

    @classmethod
    def query_and_decide(cls, namespace, verifier_parameter, public_input,
                         oracle_refs, sponge, messages):
        outer = messages.prover_round(namespace, 0)
        if outer.get_short_message(0) != [FR(public_input), FR(public_input + 1)]:
            return False
        sub_namespace = messages.bookkeeper.children(namespace)[0]
        sub_ok = SubVerifier.query_and_decide(
            sub_namespace, verifier_parameter.sub, public_input,
            MsgRoundRef(namespace, 0), sponge, messages,
        )
        if not sub_ok:
            return False
        last = messages.prover_round(namespace, 1)
        return last.get_short_message(0) == [FR(2 * public_input)]


# ─────────────────────────────────────────────────────────────────────
# 형태 선언이 어긋난 데모 verifier들
# ─────────────────────────────────────────────────────────────────────

class _MisdeclaredDemoVerifier(DemoVerifier):
    """데모 verifier의 형태 선언에서 한 항목만 바꿔 선언한다."""

    ROUND0_LOCALIZATION = 2
    CHALLENGE1_BITS = 19
    ROUND1_LENGTH = 256
    ROUND2_DEGREE_BOUNDS = [DEMO_DEGREE_BOUND]
    DECLARE_ROUND2 = True

    @classmethod
    def register_iop_structure(cls, namespace, transcript, verifier_parameter):
        transcript.receive_prover_round_shape(namespace, ProverRoundMessageInfo(
            num_short_messages=1, num_message_oracles=2, oracle_length=256,
            localization_parameter=cls.ROUND0_LOCALIZATION,
        ))
        transcript.squeeze_field_elements([FieldElementSize.FULL] * 3)
        transcript.squeeze_bytes(16)
        transcript.finalize_verifier_round(namespace)
        transcript.squeeze_bits(cls.CHALLENGE1_BITS)
        transcript.finalize_verifier_round(namespace)
        transcript.receive_prover_round_shape(namespace, ProverRoundMessageInfo(
            num_short_messages=1, num_message_oracles=1, oracle_length=cls.ROUND1_LENGTH,
        ))
        if cls.DECLARE_ROUND2:
            transcript.receive_prover_round_shape(namespace, ProverRoundMessageInfo(
                num_short_messages=1, oracle_length=128,
                reed_solomon_code_degree_bound=cls.ROUND2_DEGREE_BOUNDS,
            ))


class BrokenShapeVerifier(_MisdeclaredDemoVerifier):
    """라운드 0의 국소화를 1로 잘못 선언한다."""
    ROUND0_LOCALIZATION = 1


class ExtraSqueezeVerifier(_MisdeclaredDemoVerifier):
    """두 번째 verifier 라운드에서 20비트를 squeeze한다."""
    CHALLENGE1_BITS = 20


class WrongLengthVerifier(_MisdeclaredDemoVerifier):
    """라운드 1의 오라클 길이를 128로 선언한다."""
    ROUND1_LENGTH = 128


class WrongDegreeBoundVerifier(_MisdeclaredDemoVerifier):
    """라운드 2의 차수 상한을 7로 선언한다."""
    ROUND2_DEGREE_BOUNDS = [DEMO_DEGREE_BOUND - 1]


class MissingRoundVerifier(_MisdeclaredDemoVerifier):
    """마지막 prover 라운드(다항식 오라클)를 선언하지 않는다."""
    DECLARE_ROUND2 = False
