"""
BCS 트랜스크립트 (Prover Transcript Driver)
============================================

공개 동전 IOP의 라운드별 메시지 교환을 커밋-후-질의(commit-then-query)
형태로 바꾸는 prover 측 드라이버.

**한 라운드의 흐름**:
  1. prover 메시지 버퍼링
       send_short_message      짧은 메시지 (그대로 공개)
       send_oracle_message     오라클 메시지 (커밋 후 위치 질의만 가능)
       send_polynomial_oracle  다항식을 LDT 도메인에서 평가한 RS 오라클
  2. finalize_prover_round
       오라클을 코셋 리프로 묶어 머클 트리를 만들고,
       루트 → 짧은 메시지 순으로 스펀지에 흡수한 뒤 저장소에 추가
  3. verifier 메시지
       squeeze_field_elements / squeeze_bytes / squeeze_bits
       (스펀지 연산은 즉시 수행되고, 결과는 라운드 기록용으로만 모아둔다)
  4. finalize_verifier_round

**순서 규칙**:
  - prover 라운드가 확정되지 않은 채로 squeeze하면 UnfinalizedRound
    (아직 흡수되지 않은 데이터에 챌린지가 묶이는 것을 막는다)
  - verifier 라운드가 확정되지 않은 채로 prover 메시지를 보내도 UnfinalizedRound
  - 빈 라운드 확정은 EmptyRound

사용 예시:
    >>> transcript = Transcript(Sha256Sponge(), MerkleTreeParameters())
    >>> ns = transcript.root
    >>> transcript.send_short_message([FR(1), FR(2)])
    >>> transcript.finalize_prover_round(ns, "round 0")
    >>> alpha, = transcript.squeeze_field_elements([FieldElementSize.FULL])
    >>> transcript.finalize_verifier_round(ns, "challenge 0")
"""

import logging

from zkiop.errors import EmptyRound, StructureMismatch, UnfinalizedRound
from zkiop.field import FR, is_power_of_two, log2
from zkiop.iop.bookkeeper import Side
from zkiop.iop.message import (
    Bits,
    Bytes,
    FieldElements,
    MessagesCollection,
    ProverRoundMessageInfo,
)
from zkiop.iop.oracles import RecordingRoundOracle, coset_leaves
from zkiop.merkle import MerkleTree, MerkleTreeParameters

logger = logging.getLogger(__name__)


class TranscriptBase:
    """prover/시뮬레이션 트랜스크립트의 공통 부분.

    스펀지는 트랜스크립트가 독점하며, 하위 프로토콜 호출에는
    트랜스크립트 자체를 넘긴다.

    속성:
        sponge: Fiat-Shamir 스펀지
        messages: 라운드 저장소 (MessagesCollection)
        ldt_codeword_domain: RS 오라클이 평가되는 도메인 (LDT가 없으면 None)
        ldt_localization_parameter: RS 오라클의 국소화 (LDT가 결정)
    """

    def __init__(self, sponge, ldt_codeword_domain=None, ldt_localization_parameter=None):
        self.sponge = sponge
        self.messages = MessagesCollection()
        self.ldt_codeword_domain = ldt_codeword_domain
        self.ldt_localization_parameter = ldt_localization_parameter
        self._pending_verifier_messages = []

    @property
    def bookkeeper(self):
        return self.messages.bookkeeper

    @property
    def root(self):
        return self.bookkeeper.root

    def new_namespace(self, parent, trace=""):
        """parent 아래에 하위 프로토콜용 네임스페이스를 만든다."""
        return self.bookkeeper.new_namespace(parent, trace)

    def _has_pending_prover_data(self):
        return False

    def _check_can_squeeze(self):
        if self._has_pending_prover_data():
            raise UnfinalizedRound("prover 라운드를 확정하기 전에는 squeeze할 수 없습니다")

    # ── verifier 메시지 ──

    def squeeze_field_elements(self, sizes):
        """필드 원소 챌린지를 squeeze한다.

        Args:
            sizes: FieldElementSize 리스트

        Returns:
            list[FR]
        """
        self._check_can_squeeze()
        sizes = list(sizes)
        values = self.sponge.squeeze_field_elements(sizes)
        self._pending_verifier_messages.append(FieldElements(values, sizes))
        return values

    def squeeze_bytes(self, num_bytes):
        self._check_can_squeeze()
        data = self.sponge.squeeze_bytes(num_bytes)
        self._pending_verifier_messages.append(Bytes(data))
        return data

    def squeeze_bits(self, num_bits):
        self._check_can_squeeze()
        bits = self.sponge.squeeze_bits(num_bits)
        self._pending_verifier_messages.append(Bits(bits))
        return bits

    def finalize_verifier_round(self, namespace, trace=""):
        """모아둔 verifier 메시지를 저장소에 추가한다.

        Returns:
            int: 네임스페이스 안에서의 verifier 라운드 인덱스

        Raises:
            UnfinalizedRound: 확정되지 않은 prover 데이터가 있을 때
            EmptyRound: squeeze한 메시지가 없을 때
        """
        if self._has_pending_prover_data():
            raise UnfinalizedRound("prover 라운드가 확정되지 않았습니다")
        if not self._pending_verifier_messages:
            raise EmptyRound(
                f"verifier 라운드가 비어 있습니다 ({trace})",
                data={"namespace": namespace.id},
            )
        index = self.messages.append_verifier_round(namespace, self._pending_verifier_messages)
        logger.debug(
            "verifier round %d finalized in %r: %s",
            index, namespace, [m.shape() for m in self._pending_verifier_messages],
        )
        self._pending_verifier_messages = []
        return index

    def _check_verifier_round_closed(self):
        if self._pending_verifier_messages:
            raise UnfinalizedRound("verifier 라운드를 먼저 확정해야 합니다")

    def _resolve_rs_localization(self, info):
        """RS 오라클 라운드는 LDT 도메인 크기와 LDT 국소화를 따른다."""
        if info.num_reed_solomon_codes == 0:
            return info
        if self.ldt_codeword_domain is None:
            raise StructureMismatch("LDT 없이 차수 상한이 있는 오라클을 보낼 수 없습니다")
        if info.oracle_length != self.ldt_codeword_domain.size:
            raise StructureMismatch(
                f"RS 오라클 길이 {info.oracle_length}가 LDT 도메인 크기 "
                f"{self.ldt_codeword_domain.size}와 다릅니다"
            )
        return info.with_localization(self.ldt_localization_parameter)

    # ── 구조 요약 (하니스 비교용) ──

    def prover_round_infos(self):
        return [oracle.info for oracle in self.messages.prover_rounds]

    def verifier_round_shapes(self):
        return [[m.shape() for m in rnd] for rnd in self.messages.verifier_rounds]


class Transcript(TranscriptBase):
    """prover 측 트랜스크립트.

    속성:
        mt_parameters: 라운드 커밋먼트에 쓰는 머클 트리 파라미터
    """

    def __init__(self, sponge, mt_parameters=None, ldt_codeword_domain=None,
                 ldt_localization_parameter=None):
        super().__init__(sponge, ldt_codeword_domain, ldt_localization_parameter)
        self.mt_parameters = mt_parameters if mt_parameters is not None else MerkleTreeParameters()
        self._reset_prover_buffer()

    def _reset_prover_buffer(self):
        self._short_messages = []
        self._message_oracles = []
        self._rs_codewords = []
        self._degree_bounds = []
        self._oracle_length = None
        self._localization = None

    def _has_pending_prover_data(self):
        return bool(self._short_messages or self._message_oracles or self._rs_codewords)

    def send_short_message(self, values):
        """짧은 메시지를 현재 라운드에 버퍼링한다."""
        self._check_verifier_round_closed()
        self._short_messages.append([v if isinstance(v, FR) else FR(v) for v in values])

    def _buffer_oracle(self, values, localization):
        length = len(values)
        if not is_power_of_two(length):
            raise StructureMismatch(f"오라클 길이는 2의 거듭제곱이어야 합니다: {length}")
        if localization < 0 or localization > log2(length):
            raise StructureMismatch(
                f"국소화 파라미터 {localization}가 오라클 길이 {length}에 맞지 않습니다"
            )
        if self._oracle_length is not None and (
            self._oracle_length != length or self._localization != localization
        ):
            raise StructureMismatch(
                "한 라운드의 모든 오라클은 길이와 국소화가 같아야 합니다",
                data={
                    "expected": [self._oracle_length, self._localization],
                    "actual": [length, localization],
                },
            )
        self._oracle_length = length
        self._localization = localization

    def send_oracle_message(self, values, localization=0):
        """오라클 메시지를 현재 라운드에 버퍼링한다.

        Args:
            values: FR 리스트 (길이는 2의 거듭제곱)
            localization: 한 리프에 묶을 코셋 크기의 log2

        Raises:
            StructureMismatch: 길이/국소화가 잘못되었거나 라운드 안에서 다를 때
        """
        self._check_verifier_round_closed()
        values = [v if isinstance(v, FR) else FR(v) for v in values]
        self._buffer_oracle(values, localization)
        self._message_oracles.append(values)

    def send_polynomial_oracle(self, degree_bound, polynomial):
        """다항식을 LDT 도메인에서 평가하여 RS 오라클로 보낸다.

        Raises:
            StructureMismatch: LDT 도메인이 없거나 차수가 상한을 넘을 때
        """
        self._check_verifier_round_closed()
        if self.ldt_codeword_domain is None:
            raise StructureMismatch("LDT 도메인이 설정되지 않았습니다")
        if polynomial.degree > degree_bound:
            raise StructureMismatch(
                f"다항식 차수 {polynomial.degree}가 상한 {degree_bound}를 넘습니다",
                data={"degree": polynomial.degree, "degree_bound": degree_bound},
            )
        if degree_bound >= self.ldt_codeword_domain.size:
            raise StructureMismatch(
                f"차수 상한 {degree_bound}가 도메인 크기 {self.ldt_codeword_domain.size} 이상입니다"
            )
        evaluations = self.ldt_codeword_domain.evaluate(polynomial)
        self._buffer_oracle(evaluations, self.ldt_localization_parameter)
        self._rs_codewords.append(evaluations)
        self._degree_bounds.append(degree_bound)

    def finalize_prover_round(self, namespace, trace=""):
        """버퍼링된 prover 메시지를 커밋하고 저장소에 추가한다.

        Returns:
            int: 네임스페이스 안에서의 prover 라운드 인덱스

        Raises:
            UnfinalizedRound: verifier 라운드가 확정되지 않았을 때
            EmptyRound: 버퍼가 비어 있을 때
        """
        self._check_verifier_round_closed()
        if not self._has_pending_prover_data():
            raise EmptyRound(
                f"prover 라운드가 비어 있습니다 ({trace})",
                data={"namespace": namespace.id},
            )
        # 네임스페이스 확인을 커밋보다 먼저
        self.bookkeeper.next_round(namespace, Side.PROVER)

        oracles = self._rs_codewords + self._message_oracles
        info = ProverRoundMessageInfo(
            num_short_messages=len(self._short_messages),
            num_message_oracles=len(self._message_oracles),
            oracle_length=self._oracle_length or 0,
            localization_parameter=self._localization or 0,
            reed_solomon_code_degree_bound=self._degree_bounds,
        )

        tree = None
        if oracles:
            tree = MerkleTree(coset_leaves(oracles, info.localization_parameter), self.mt_parameters)
            self.sponge.absorb(tree.root)
        for message in self._short_messages:
            self.sponge.absorb(message)

        oracle = RecordingRoundOracle(info, self._short_messages, oracles, tree)
        index = self.messages.append_prover_round(namespace, oracle)
        logger.debug("prover round %d finalized in %r (%s): %r", index, namespace, trace, info)
        self._reset_prover_buffer()
        return index

    def commitments(self):
        """라운드마다 (다이제스트, 짧은 메시지): 시뮬레이션 트랜스크립트가 흡수할 데이터."""
        return [(oracle.digest, oracle.short_messages) for oracle in self.messages.prover_rounds]
