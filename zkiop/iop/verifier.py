"""
IOP Verifier 계약 (Verifier Contract)
======================================

공개 동전 IOP의 verifier는 두 단계로 동작한다.

**커밋 단계 (register_iop_structure)**:
  verifier 파라미터만으로 prover 라운드의 형태를 선언하고
  verifier 메시지를 squeeze한다. 공개 입력과 prover 데이터에
  따라 분기해서는 안 된다. 그래야 질의 위치가 이미 커밋된
  데이터에만 묶인다.

**질의 및 결정 단계 (query_and_decide)**:
  커밋 단계가 끝난(freeze된) 메시지 저장소에 위치 질의를 하고
  결과를 반환한다. 악의적인 증명 내용은 예외가 아니라 거부 출력
  (예: False)으로 표현해야 한다.

**조합 규칙 (ProtocolPair)**:
  prover/verifier 쌍의 파라미터, 오라클 참조, 공개 입력 타입은
  정확히 같아야 한다. BCS 변환의 최상위 verifier는 다른
  네임스페이스의 오라클을 참조하지 않아야 한다 (OracleRefs = NoOracleRefs).
  이 검사는 조합 시점에 한 번만 수행한다.

사용 예시:
    >>> pair = ProtocolPair(DemoProver, DemoVerifier)
    >>> pair.verifier_parameter(prover_parameter)
"""

import logging

from zkiop.errors import IncompatibleProtocols
from zkiop.iop.prover import NoOracleRefs, verifier_param_for, verifier_type_for

logger = logging.getLogger(__name__)


class VerifierParam:
    """verifier 파라미터의 표식 기본 클래스."""


class IOPVerifier:
    """공개 동전 IOP의 verifier."""

    VerifierOutput = bool
    VerifierParameter = type(None)
    OracleRefs = NoOracleRefs
    PublicInput = type(None)

    @classmethod
    def register_iop_structure(cls, namespace, transcript, verifier_parameter):
        """SimulationTranscript에 라운드 형태와 squeeze 순서를 선언한다."""
        raise NotImplementedError

    @classmethod
    def query_and_decide(cls, namespace, verifier_parameter, public_input,
                         oracle_refs, sponge, messages):
        """질의하고 결정한다.

        Args:
            namespace: 이 프로토콜 인스턴스의 네임스페이스
            verifier_parameter: verifier 파라미터
            public_input: 공개 입력
            oracle_refs: 외부 네임스페이스의 라운드 참조
            sponge: 커밋 단계 이후 이어지는 스펀지
            messages: freeze된 MessagesCollection

        Returns:
            VerifierOutput: 수락/거부를 명시적으로 담은 출력
        """
        raise NotImplementedError


def _type_name(t):
    return getattr(t, "__name__", repr(t))


def check_verifier_for_prover(prover, verifier):
    """prover/verifier 쌍의 구조적 호환성을 검사한다.

    Raises:
        IncompatibleProtocols: 파라미터, 오라클 참조, 공개 입력 타입이 다를 때
    """
    problems = []

    expected_param = verifier_type_for(prover.ProverParameter)
    if expected_param is not verifier.VerifierParameter:
        problems.append(
            f"VerifierParameter: {_type_name(expected_param)} != "
            f"{_type_name(verifier.VerifierParameter)}"
        )

    expected_refs = getattr(prover.RoundOracleRefs, "VerifierOracleRefs", prover.RoundOracleRefs)
    if expected_refs is not verifier.OracleRefs:
        problems.append(
            f"OracleRefs: {_type_name(expected_refs)} != {_type_name(verifier.OracleRefs)}"
        )

    if prover.PublicInput is not verifier.PublicInput:
        problems.append(
            f"PublicInput: {_type_name(prover.PublicInput)} != "
            f"{_type_name(verifier.PublicInput)}"
        )

    if problems:
        raise IncompatibleProtocols(
            f"{prover.__name__}와 {verifier.__name__}는 호환되지 않습니다: "
            + "; ".join(problems),
            data={"prover": prover.__name__, "verifier": verifier.__name__},
        )


def check_no_oracle_refs(verifier):
    """BCS 변환에 쓸 최상위 verifier인지 검사한다."""
    if verifier.OracleRefs is not NoOracleRefs:
        raise IncompatibleProtocols(
            f"{verifier.__name__}는 외부 오라클 참조가 필요하므로 최상위 프로토콜이 될 수 없습니다",
            data={"verifier": verifier.__name__},
        )


class ProtocolPair:
    """구조 검사를 통과한 prover/verifier 쌍.

    속성:
        prover: IOPProver 서브클래스
        verifier: IOPVerifier 서브클래스
        top_level: BCS 변환의 최상위 프로토콜로 쓸 수 있는지
    """

    def __init__(self, prover, verifier, top_level=True):
        check_verifier_for_prover(prover, verifier)
        if top_level:
            check_no_oracle_refs(verifier)
        self.prover = prover
        self.verifier = verifier
        self.top_level = top_level
        logger.debug("composed %s with %s", prover.__name__, verifier.__name__)

    def verifier_parameter(self, prover_parameter):
        return verifier_param_for(prover_parameter)

    @property
    def name(self):
        return f"{self.prover.__name__}/{self.verifier.__name__}"

    def __repr__(self):
        return f"ProtocolPair({self.name}, top_level={self.top_level})"
