"""
IOP / BCS 오류 계층
====================

모든 오류는 BCSError를 상속하며 안정적인 기계 판독용 code와
선택적 data(dict)를 가진다.

**두 종류의 오류**:
  - 프로토콜 사용 오류 (NamespaceNotFound, MissingRound, EmptyRound,
    StructureMismatch, UnfinalizedRound, TranscriptFrozen,
    IncompatibleProtocols, OracleQueryOutOfBounds):
    프로토콜 구현이 잘못 연결된 것이므로 즉시 전파된다. 재시도하지 않는다.
  - MalformedProof:
    공격자가 만든 증명 내용에서 비롯된 오류. BCS verifier가 잡아서
    거부(rejecting) 결과로 변환한다.

사용 예시:
    >>> raise MissingRound("round 3 not finalized", data={"namespace": 0})
"""


class BCSError(Exception):
    """IOP/BCS 오류의 기본 클래스."""

    default_code = "bcs_error"

    def __init__(self, message="", *, code=None, data=None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.data = dict(data) if data else {}

    def __str__(self):
        if self.message:
            return f"{self.code}: {self.message}"
        return self.code

    def to_dict(self):
        return {"code": self.code, "message": self.message, "data": self.data}


class NamespaceNotFound(BCSError):
    """등록되지 않은 네임스페이스를 조회했다."""
    default_code = "namespace_not_found"


class MissingRound(BCSError):
    """아직 확정(finalize)되지 않은 라운드를 조회했다."""
    default_code = "missing_round"


class EmptyRound(BCSError):
    """버퍼에 아무 메시지도 없는 라운드를 확정하려 했다."""
    default_code = "empty_round"


class StructureMismatch(BCSError):
    """선언된 라운드 형태와 실제 형태가 다르다."""
    default_code = "structure_mismatch"


class OracleQueryOutOfBounds(BCSError):
    """오라클 길이 또는 짧은 메시지 개수를 넘는 위치를 질의했다."""
    default_code = "oracle_query_out_of_bounds"


class MalformedProof(BCSError):
    """증명 내용이 형식에 맞지 않는다 (거부 사유)."""
    default_code = "malformed_proof"


class UnfinalizedRound(BCSError):
    """이전 라운드를 확정하지 않고 다음 동작을 시작했다."""
    default_code = "unfinalized_round"


class TranscriptFrozen(BCSError):
    """커밋 단계가 끝난 메시지 저장소에 라운드를 추가하려 했다."""
    default_code = "transcript_frozen"


class IncompatibleProtocols(BCSError):
    """prover와 verifier의 파라미터/입력 타입이 맞지 않는다."""
    default_code = "incompatible_protocols"
