"""
BCS 증명 생성 (BCS Proof Generation)
=====================================

공개 동전 IOP + LDT를 실행하여 비대화식 증명을 만든다.

**생성 순서**:
  1. 커밋 단계
       루트 네임스페이스에서 protocol.prove 실행
       RS 오라클 라운드를 모아 루트의 자식 네임스페이스에서 ldt.prove 실행
  2. 저장소 freeze (이후 라운드 추가 불가)
  3. 질의 단계 (커밋 단계에서 이어지는 스펀지 사용)
       ldt.query_and_decide → protocol.verifier.query_and_decide
       RecordingRoundOracle이 질의된 코셋을 순서대로 기록한다
  4. 라운드마다 증명 데이터 구성
       형태(info), 머클 루트, 짧은 메시지,
       질의된 코셋 순서, 리프 값, 인증 경로(코셋당 하나)

사용 예시:
    >>> proof = BCSProof.generate(pair, LinearCombinationLDT, Sha256Sponge(),
    ...                           seed, None, None, ldt_param)
    >>> proof.num_rounds
"""

import logging

from zkiop.bcs.transcript import Transcript
from zkiop.iop.prover import verifier_param_for

logger = logging.getLogger(__name__)


def run_commit_phase(prover, ldt, sponge, public_input, private_input,
                     prover_parameter, ldt_parameter, mt_parameters=None):
    """prover와 LDT의 커밋 단계를 실행한다.

    Returns:
        tuple: (Transcript, LDT 네임스페이스, RS 라운드 참조 리스트)
    """
    transcript = Transcript(
        sponge,
        mt_parameters,
        ldt.codeword_domain(ldt_parameter),
        ldt.localization_param(ldt_parameter),
    )
    root = transcript.root
    prover.prove(root, None, public_input, private_input, transcript, prover_parameter)

    codewords = transcript.messages.rounds_with_degree_bounds()
    ldt_namespace = transcript.new_namespace(root, "ldt")
    ldt.prove(ldt_namespace, ldt_parameter, transcript, codewords)
    return transcript, ldt_namespace, codewords


class RoundProof:
    """prover 라운드 하나의 증명 데이터.

    속성:
        info: ProverRoundMessageInfo
        digest: 머클 루트 (오라클이 없으면 None)
        short_messages: 짧은 메시지 리스트
        queried_cosets: 질의된 코셋 인덱스 (질의 순서, 중복 포함)
        leaves: queried_cosets 순서의 리프 값
        paths: 코셋 인덱스 → 인증 경로
    """

    def __init__(self, info, digest, short_messages, queried_cosets, leaves, paths):
        self.info = info
        self.digest = digest
        self.short_messages = short_messages
        self.queried_cosets = queried_cosets
        self.leaves = leaves
        self.paths = paths

    @classmethod
    def from_oracle(cls, oracle):
        queried = list(oracle.queried_cosets)
        paths = oracle.tree.open(queried) if oracle.tree is not None else {}
        return cls(
            oracle.info,
            oracle.digest,
            [list(m) for m in oracle.short_messages],
            queried,
            [list(oracle.leaf(c)) for c in queried],
            paths,
        )

    def __repr__(self):
        return f"RoundProof({self.info!r}, queries={len(self.queried_cosets)})"


class BCSProof:
    """BCS 변환으로 만든 비대화식 증명.

    속성:
        rounds: 전역 순서의 RoundProof 리스트
        prover_output: prover 측에서 실행한 결정 로직의 출력 (디버깅용)
    """

    def __init__(self, rounds, prover_output=None):
        self.rounds = rounds
        self.prover_output = prover_output

    @classmethod
    def generate(cls, protocol, ldt, sponge, public_input, private_input,
                 prover_parameter, ldt_parameter, mt_parameters=None):
        """증명을 생성한다.

        Args:
            protocol: ProtocolPair
            ldt: LDT 클래스
            sponge: 초기 상태의 스펀지 (verifier도 같은 초기 상태를 써야 한다)
            public_input: 공개 입력
            private_input: 비공개 입력
            prover_parameter: prover 파라미터
            ldt_parameter: LDT 파라미터
            mt_parameters: 머클 트리 파라미터

        Returns:
            BCSProof
        """
        transcript, ldt_namespace, codewords = run_commit_phase(
            protocol.prover, ldt, sponge, public_input, private_input,
            prover_parameter, ldt_parameter, mt_parameters,
        )
        messages = transcript.messages.freeze()

        # 질의 단계: verifier와 같은 순서로 질의하여 열 위치를 기록한다
        ldt_ok = ldt.query_and_decide(
            ldt_namespace, ldt_parameter, transcript.sponge, codewords, messages
        )
        output = protocol.verifier.query_and_decide(
            transcript.root,
            verifier_param_for(prover_parameter),
            public_input,
            None,
            transcript.sponge,
            messages,
        )
        if not ldt_ok or not output:
            logger.warning("prover-side decision rejected its own proof (ldt=%s)", ldt_ok)

        proof = cls([RoundProof.from_oracle(oracle) for oracle in messages.prover_rounds], output)
        logger.info(
            "generated proof for %s: %d prover rounds, %d queried cosets",
            protocol.name, proof.num_rounds, proof.num_queries,
        )
        return proof

    @property
    def num_rounds(self):
        return len(self.rounds)

    @property
    def num_queries(self):
        return sum(len(r.queried_cosets) for r in self.rounds)

    def commitments(self):
        """라운드마다 (다이제스트, 짧은 메시지)."""
        return [(r.digest, r.short_messages) for r in self.rounds]
