"""
시뮬레이션 트랜스크립트 (Verifier Structure-Simulation Driver)
===============================================================

verifier 파라미터만으로 정직한 prover가 만들 라운드/챌린지 구조를
재현한다. 실제 prover 메시지는 만들지 않는다.

**두 가지 사용법**:
  1. 구조만 시뮬레이션 (received=None)
       선언된 라운드 형태와 squeeze 연산의 종류/크기/순서만 기록한다.
       스펀지가 prover 데이터를 흡수하지 않으므로 squeeze된 값은
       prover와 다르지만, 형태는 같아야 한다.
  2. 증명의 커밋먼트와 함께 (received=[(digest, short_messages), ...])
       prover가 흡수한 것과 같은 데이터를 같은 순서로 흡수하므로
       squeeze된 값까지 prover와 같아진다. BCS verifier가 사용한다.

**RS 오라클 라운드**:
  차수 상한이 있는 라운드의 오라클 길이는 LDT 코드워드 도메인 크기와
  같아야 하고, 국소화는 LDT가 정한 값으로 대체된다.

사용 예시:
    >>> sim = SimulationTranscript(Sha256Sponge(), domain, 1)
    >>> sim.receive_prover_round_shape(sim.root, ProverRoundMessageInfo(1, 2, 256, 2))
    >>> sim.squeeze_bits(19)
    >>> sim.finalize_verifier_round(sim.root)
"""

import logging

from zkiop.bcs.transcript import TranscriptBase
from zkiop.errors import EmptyRound, MalformedProof, StructureMismatch
from zkiop.field import is_power_of_two, log2
from zkiop.iop.bookkeeper import Side
from zkiop.iop.oracles import RoundOracle

logger = logging.getLogger(__name__)


class SimulationTranscript(TranscriptBase):
    """verifier 측 구조 시뮬레이션 트랜스크립트.

    속성:
        received: 라운드마다의 (다이제스트, 짧은 메시지) 또는 None
    """

    def __init__(self, sponge, ldt_codeword_domain=None, ldt_localization_parameter=None,
                 received=None):
        super().__init__(sponge, ldt_codeword_domain, ldt_localization_parameter)
        self.received = list(received) if received is not None else None

    def _validate_shape(self, info):
        if info.num_oracles == 0:
            if info.oracle_length != 0:
                raise StructureMismatch(
                    f"오라클이 없는 라운드의 오라클 길이는 0이어야 합니다: {info.oracle_length}"
                )
            return
        if not is_power_of_two(info.oracle_length):
            raise StructureMismatch(f"오라클 길이는 2의 거듭제곱이어야 합니다: {info.oracle_length}")
        if info.localization_parameter > log2(info.oracle_length):
            raise StructureMismatch(
                f"국소화 파라미터 {info.localization_parameter}가 "
                f"오라클 길이 {info.oracle_length}에 맞지 않습니다"
            )

    def _absorb_received(self, info):
        index = len(self.messages.prover_rounds)
        if index >= len(self.received):
            raise MalformedProof(
                f"증명에 prover 라운드 {index}의 커밋먼트가 없습니다", data={"round": index}
            )
        digest, short_messages = self.received[index]
        if (digest is None) != (info.num_oracles == 0):
            raise MalformedProof("라운드 다이제스트가 선언된 오라클 수와 맞지 않습니다",
                                 data={"round": index})
        if len(short_messages) != info.num_short_messages:
            raise MalformedProof(
                f"짧은 메시지 {len(short_messages)}개, 선언은 {info.num_short_messages}개",
                data={"round": index},
            )
        if digest is not None:
            self.sponge.absorb(digest)
        for message in short_messages:
            self.sponge.absorb(list(message))
        return short_messages

    def receive_prover_round_shape(self, namespace, expected_info, trace=""):
        """현재 prover 라운드의 형태를 선언한다.

        Returns:
            int: 네임스페이스 안에서의 prover 라운드 인덱스

        Raises:
            UnfinalizedRound: verifier 라운드가 확정되지 않았을 때
            StructureMismatch: RS 라운드가 LDT 도메인과 맞지 않을 때
            MalformedProof: 받은 커밋먼트가 선언된 형태와 다를 때
        """
        self._check_verifier_round_closed()
        info = self._resolve_rs_localization(expected_info)
        self._validate_shape(info)
        if info.num_oracles == 0 and info.num_short_messages == 0:
            raise EmptyRound("비어 있는 prover 라운드는 선언할 수 없습니다")
        self.bookkeeper.next_round(namespace, Side.PROVER)

        short_messages = None
        if self.received is not None:
            short_messages = self._absorb_received(info)

        index = self.messages.append_prover_round(namespace, RoundOracle(info, short_messages))
        logger.debug("simulated prover round %d in %r (%s): %r", index, namespace, trace, info)
        return index

    def has_unreceived_rounds(self):
        """증명에 시뮬레이션보다 많은 라운드가 들어 있는지."""
        return self.received is not None and len(self.received) > len(self.messages.prover_rounds)
