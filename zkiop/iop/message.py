"""
IOP 메시지 및 메시지 저장소 (Message Repository)
=================================================

**ProverRoundMessageInfo**:
  prover 라운드 하나의 선언된 형태(shape).
    num_short_messages             짧은 메시지 개수
    num_message_oracles            저차 주장이 없는 일반 오라클 개수
    oracle_length                  오라클 길이 (오라클이 없으면 0)
    localization_parameter         코셋 크기 2^l
    reed_solomon_code_degree_bound RS 오라클마다 하나씩의 차수 상한

  RS 오라클은 degree bound 리스트로만 세며 num_message_oracles에는
  포함되지 않는다. 한 라운드의 모든 오라클은 길이와 국소화가 같다.

**VerifierMessage**:
  스펀지에서 squeeze한 verifier 메시지. 세 가지 변형이 있다.
    FieldElements(values, sizes) / Bytes(data) / Bits(bits)

**MessagesCollection**:
  (네임스페이스, 라운드, 방향) → 라운드 데이터 저장소.
  커밋 단계에서는 추가만 가능하고, freeze() 이후 질의/결정 단계에서는
  읽기 전용이다.
"""

import logging

from zkiop.errors import TranscriptFrozen
from zkiop.iop.bookkeeper import MessageBookkeeper, Side

logger = logging.getLogger(__name__)


class ProverRoundMessageInfo:
    """prover 라운드의 선언된 형태. 라운드 확정 후에는 바뀌지 않는다."""

    def __init__(
        self,
        num_short_messages=0,
        num_message_oracles=0,
        oracle_length=0,
        localization_parameter=0,
        reed_solomon_code_degree_bound=None,
    ):
        self.num_short_messages = num_short_messages
        self.num_message_oracles = num_message_oracles
        self.oracle_length = oracle_length
        self.localization_parameter = localization_parameter
        self.reed_solomon_code_degree_bound = list(reed_solomon_code_degree_bound or [])

    @property
    def num_reed_solomon_codes(self):
        return len(self.reed_solomon_code_degree_bound)

    @property
    def num_oracles(self):
        """RS 오라클과 일반 오라클을 합한 개수 (질의 결과의 열 수)."""
        return self.num_reed_solomon_codes + self.num_message_oracles

    @property
    def coset_size(self):
        return 1 << self.localization_parameter

    @property
    def num_cosets(self):
        if self.num_oracles == 0:
            return 0
        return self.oracle_length >> self.localization_parameter

    def with_localization(self, localization_parameter):
        return ProverRoundMessageInfo(
            self.num_short_messages,
            self.num_message_oracles,
            self.oracle_length,
            localization_parameter,
            self.reed_solomon_code_degree_bound,
        )

    def as_tuple(self):
        return (
            self.num_short_messages,
            self.num_message_oracles,
            self.oracle_length,
            self.localization_parameter,
            tuple(self.reed_solomon_code_degree_bound),
        )

    def to_dict(self):
        return {
            "num_short_messages": self.num_short_messages,
            "num_message_oracles": self.num_message_oracles,
            "oracle_length": self.oracle_length,
            "localization_parameter": self.localization_parameter,
            "reed_solomon_code_degree_bound": list(self.reed_solomon_code_degree_bound),
        }

    def __eq__(self, other):
        return isinstance(other, ProverRoundMessageInfo) and self.as_tuple() == other.as_tuple()

    def __hash__(self):
        return hash(self.as_tuple())

    def __repr__(self):
        return (
            "ProverRoundMessageInfo("
            f"short={self.num_short_messages}, oracles={self.num_message_oracles}, "
            f"length={self.oracle_length}, localization={self.localization_parameter}, "
            f"degree_bounds={self.reed_solomon_code_degree_bound})"
        )


# ─────────────────────────────────────────────────────────────────────
# Verifier 메시지
# ─────────────────────────────────────────────────────────────────────

class VerifierMessage:
    """verifier 메시지의 공통 기반 클래스."""

    kind = None

    def __init__(self, value):
        self.value = value

    def shape(self):
        """(종류, 크기): squeeze 연산 순서를 값과 무관하게 비교할 때 쓴다."""
        return (self.kind, len(self.value))

    def __eq__(self, other):
        return (
            type(self) is type(other)
            and self.shape() == other.shape()
            and list(self.value) == list(other.value)
        )

    def __len__(self):
        return len(self.value)

    def __repr__(self):
        return f"{type(self).__name__}(len={len(self.value)})"


class FieldElements(VerifierMessage):
    kind = "field_elements"

    def __init__(self, value, sizes):
        super().__init__(list(value))
        self.sizes = list(sizes)

    def shape(self):
        return (self.kind, tuple(self.sizes))


class Bytes(VerifierMessage):
    kind = "bytes"

    def __init__(self, value):
        super().__init__(bytes(value))


class Bits(VerifierMessage):
    kind = "bits"

    def __init__(self, value):
        super().__init__([bool(b) for b in value])


class MsgRoundRef:
    """다른 네임스페이스의 prover 라운드를 가리키는 참조 (오라클 참조)."""

    def __init__(self, namespace, index):
        self.namespace = namespace
        self.index = index

    def __eq__(self, other):
        return (
            isinstance(other, MsgRoundRef)
            and self.namespace == other.namespace
            and self.index == other.index
        )

    def __hash__(self):
        return hash((self.namespace, self.index))

    def __repr__(self):
        return f"MsgRoundRef({self.namespace!r}, {self.index})"


# ─────────────────────────────────────────────────────────────────────
# 메시지 저장소
# ─────────────────────────────────────────────────────────────────────

class MessagesCollection:
    """트랜스크립트 전체의 prover 라운드 오라클과 verifier 메시지 저장소.

    속성:
        prover_rounds: 전역 순서의 RoundOracle 리스트
        verifier_rounds: 전역 순서의 VerifierMessage 리스트의 리스트
        bookkeeper: 네임스페이스 → 전역 인덱스 대응
    """

    def __init__(self, bookkeeper=None, prover_rounds=None, verifier_rounds=None):
        self.bookkeeper = bookkeeper if bookkeeper is not None else MessageBookkeeper()
        self.prover_rounds = list(prover_rounds or [])
        self.verifier_rounds = list(verifier_rounds or [])
        self.frozen = False

    # ── 커밋 단계 (추가 전용) ──

    def _ensure_open(self):
        if self.frozen:
            raise TranscriptFrozen("질의 단계에서는 라운드를 추가할 수 없습니다")

    def append_prover_round(self, namespace, oracle):
        """확정된 prover 라운드를 추가하고 로컬 인덱스를 반환한다."""
        self._ensure_open()
        local = self.bookkeeper.attach_round(namespace, Side.PROVER, len(self.prover_rounds))
        self.prover_rounds.append(oracle)
        return local

    def append_verifier_round(self, namespace, messages):
        self._ensure_open()
        local = self.bookkeeper.attach_round(
            namespace, Side.VERIFIER, len(self.verifier_rounds)
        )
        self.verifier_rounds.append(list(messages))
        return local

    def freeze(self):
        """커밋 단계를 끝낸다. 이후에는 읽기만 가능하다."""
        self.frozen = True
        return self

    # ── 조회 ──

    def prover_round(self, namespace, index):
        """prover 라운드 뷰(RoundOracle)를 반환한다.

        Raises:
            NamespaceNotFound, MissingRound
        """
        return self.prover_rounds[self.bookkeeper.round_index(namespace, Side.PROVER, index)]

    def prover_round_by_ref(self, ref):
        return self.prover_round(ref.namespace, ref.index)

    def verifier_round(self, namespace, index):
        return self.verifier_rounds[
            self.bookkeeper.round_index(namespace, Side.VERIFIER, index)
        ]

    def prover_round_info(self, namespace, index):
        return self.prover_round(namespace, index).info

    def num_prover_rounds(self, namespace):
        return self.bookkeeper.num_rounds(namespace, Side.PROVER)

    def num_verifier_rounds(self, namespace):
        return self.bookkeeper.num_rounds(namespace, Side.VERIFIER)

    def prover_round_refs(self):
        """전역 순서로 모든 prover 라운드의 (네임스페이스, 로컬 인덱스) 참조."""
        refs = [None] * len(self.prover_rounds)
        for ns in self.bookkeeper.namespaces():
            for local in range(self.bookkeeper.num_rounds(ns, Side.PROVER)):
                refs[self.bookkeeper.round_index(ns, Side.PROVER, local)] = MsgRoundRef(ns, local)
        return refs

    def rounds_with_degree_bounds(self):
        """RS 오라클을 가진 모든 prover 라운드의 참조 (LDT 입력)."""
        return [
            ref
            for ref, oracle in zip(self.prover_round_refs(), self.prover_rounds)
            if oracle.info.num_reed_solomon_codes > 0
        ]
