"""
IOP Prover 계약 (Prover Contract)
==================================

프로토콜 구현은 IOPProver를 상속하고 prove()를 구현한다.

**연관 타입 (클래스 속성)**:
  ProverParameter   prover 파라미터 타입
  RoundOracleRefs   다른 네임스페이스 오라클에 대한 참조 타입
  PublicInput       공개 입력 타입
  PrivateInput      비공개 입력(witness) 타입

  ProverParameter가 ProverParam을 상속하면 to_verifier_param()으로
  대응되는 verifier 파라미터를 얻는다. 참조 타입도 VerifierOracleRefs로
  verifier 쪽 타입을 선언할 수 있다. 선언하지 않으면 같은 타입을 쓴다.

사용 예시:
    >>> class MyProver(IOPProver):
    ...     PublicInput = int
    ...     @classmethod
    ...     def prove(cls, namespace, oracle_refs, public_input,
    ...               private_input, transcript, prover_parameter):
    ...         transcript.send_short_message([FR(public_input)])
    ...         transcript.finalize_prover_round(namespace)
"""

# 다른 네임스페이스 오라클을 참조하지 않는 프로토콜의 참조 타입
NoOracleRefs = type(None)


class ProverParam:
    """verifier 파라미터로 변환할 수 있는 prover 파라미터."""

    # 대응되는 verifier 파라미터 클래스
    VerifierParameter = type(None)

    def to_verifier_param(self):
        raise NotImplementedError


def verifier_param_for(prover_parameter):
    """prover 파라미터에서 verifier 파라미터를 얻는다.

    ProverParam이 아니면 같은 값을 그대로 사용한다 (None 등).
    """
    if isinstance(prover_parameter, ProverParam):
        return prover_parameter.to_verifier_param()
    return prover_parameter


def verifier_type_for(prover_parameter_type):
    """prover 파라미터 타입에 대응되는 verifier 파라미터 타입."""
    if isinstance(prover_parameter_type, type) and issubclass(prover_parameter_type, ProverParam):
        return prover_parameter_type.VerifierParameter
    return prover_parameter_type


class IOPProver:
    """공개 동전 IOP의 prover.

    prove()는 Transcript에 메시지를 보내고 라운드를 확정한다.
    verifier 메시지는 트랜스크립트에서 squeeze하여 얻는다.
    """

    ProverParameter = type(None)
    RoundOracleRefs = NoOracleRefs
    PublicInput = type(None)
    PrivateInput = type(None)

    @classmethod
    def prove(cls, namespace, oracle_refs, public_input, private_input,
              transcript, prover_parameter):
        """커밋 단계의 prover 메시지를 트랜스크립트에 기록한다.

        Args:
            namespace: 이 프로토콜 인스턴스의 네임스페이스
            oracle_refs: 외부 네임스페이스의 라운드 참조 (없으면 None)
            public_input: 공개 입력
            private_input: 비공개 입력
            transcript: zkiop.bcs.transcript.Transcript
            prover_parameter: prover 파라미터

        Raises:
            BCSError: 프로토콜 사용 오류
        """
        raise NotImplementedError
