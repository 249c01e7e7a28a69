"""
BCS 증명 검증 (BCS Verification)
=================================

**검증 순서**:
  1. 커밋 단계 시뮬레이션
       증명의 (루트, 짧은 메시지)를 받은 SimulationTranscript에서
       verifier.register_iop_structure → ldt.register_iop_structure
       prover와 같은 데이터를 같은 순서로 흡수하므로 같은 챌린지를 얻는다.
  2. 형태 비교
       증명의 라운드 수와 라운드 형태가 시뮬레이션과 같아야 한다.
  3. 머클 열기 검증
       질의된 모든 리프를 라운드 루트에 대해 검증한다. 결정 로직보다
       먼저 수행하므로 RoundOracle.query는 인증된 값만 돌려준다.
  4. 결정 로직
       SuccinctRoundOracle 위에서 ldt.query_and_decide →
       verifier.query_and_decide
  5. 증명에 담긴 질의 답이 모두 소비되었는지 확인

  증명 내용에서 비롯된 MalformedProof는 모두 거부 결과로 바뀐다.
  프로토콜 사용 오류(StructureMismatch 등)는 그대로 전파된다.

사용 예시:
    >>> result = BCSVerifier.verify(pair, LinearCombinationLDT, Sha256Sponge(),
    ...                             proof, seed, None, ldt_param)
    >>> bool(result)   # True
"""

import logging

from zkiop.bcs.simulation import SimulationTranscript
from zkiop.errors import MalformedProof
from zkiop.iop.message import MessagesCollection
from zkiop.iop.oracles import SuccinctRoundOracle
from zkiop.merkle import MerkleTreeParameters

logger = logging.getLogger(__name__)


class VerificationResult:
    """검증 결과.

    속성:
        accepted: 수락 여부
        output: verifier 결정 로직의 출력 (거부 시 None일 수 있다)
        reason: 거부 사유
    """

    def __init__(self, accepted, output=None, reason=""):
        self.accepted = accepted
        self.output = output
        self.reason = reason

    @classmethod
    def reject(cls, reason, output=None):
        logger.info("proof rejected: %s", reason)
        return cls(False, output, reason)

    def __bool__(self):
        return self.accepted

    def to_dict(self):
        return {"accepted": self.accepted, "reason": self.reason}

    def __repr__(self):
        if self.accepted:
            return "VerificationResult(accepted)"
        return f"VerificationResult(rejected: {self.reason})"


def simulate_commit_phase(verifier, ldt, sponge, verifier_parameter, ldt_parameter,
                          received=None):
    """verifier와 LDT의 커밋 단계를 시뮬레이션한다.

    Returns:
        tuple: (SimulationTranscript, LDT 네임스페이스, RS 라운드 참조 리스트)
    """
    sim = SimulationTranscript(
        sponge,
        ldt.codeword_domain(ldt_parameter),
        ldt.localization_param(ldt_parameter),
        received,
    )
    root = sim.root
    verifier.register_iop_structure(root, sim, verifier_parameter)

    codewords = sim.messages.rounds_with_degree_bounds()
    ldt_namespace = sim.new_namespace(root, "ldt")
    ldt.register_iop_structure(ldt_namespace, ldt_parameter, sim, codewords)
    return sim, ldt_namespace, codewords


def verify_openings(round_proof, mt_parameters):
    """라운드 하나의 머클 열기를 검증한다.

    Raises:
        MalformedProof: 경로가 없거나 틀렸거나 리프 크기가 맞지 않을 때
    """
    info = round_proof.info
    if len(round_proof.leaves) != len(round_proof.queried_cosets):
        raise MalformedProof("질의 코셋 수와 리프 수가 다릅니다")
    if not round_proof.queried_cosets:
        return
    if round_proof.digest is None:
        raise MalformedProof("오라클이 없는 라운드에 열기가 있습니다")
    leaf_size = info.num_oracles * info.coset_size
    for coset, leaf in zip(round_proof.queried_cosets, round_proof.leaves):
        if len(leaf) != leaf_size:
            raise MalformedProof(
                f"리프 크기 {len(leaf)}, 기대 {leaf_size}", data={"coset": coset}
            )
        path = round_proof.paths.get(coset)
        if path is None:
            raise MalformedProof(f"코셋 {coset}의 인증 경로가 없습니다", data={"coset": coset})
        if not mt_parameters.verify_path(round_proof.digest, leaf, coset, path):
            raise MalformedProof(f"코셋 {coset}의 머클 경로가 틀렸습니다", data={"coset": coset})


class BCSVerifier:
    """BCS 증명 검증기."""

    @classmethod
    def verify(cls, protocol, ldt, sponge, proof, public_input, verifier_parameter,
               ldt_parameter, mt_parameters=None):
        """증명을 검증한다.

        Args:
            protocol: ProtocolPair
            ldt: LDT 클래스
            sponge: prover와 같은 초기 상태의 스펀지
            proof: BCSProof
            public_input: 공개 입력
            verifier_parameter: verifier 파라미터
            ldt_parameter: LDT 파라미터
            mt_parameters: 머클 트리 파라미터

        Returns:
            VerificationResult
        """
        if mt_parameters is None:
            mt_parameters = MerkleTreeParameters()
        verifier = protocol.verifier

        try:
            sim, ldt_namespace, codewords = simulate_commit_phase(
                verifier, ldt, sponge, verifier_parameter, ldt_parameter,
                received=proof.commitments(),
            )
        except MalformedProof as exc:
            return VerificationResult.reject(f"commit phase: {exc}")

        simulated = sim.messages.prover_rounds
        if len(simulated) != proof.num_rounds:
            return VerificationResult.reject(
                f"proof has {proof.num_rounds} rounds, expected {len(simulated)}"
            )
        for index, (expected, round_proof) in enumerate(zip(simulated, proof.rounds)):
            if expected.info != round_proof.info:
                return VerificationResult.reject(
                    f"round {index} shape {round_proof.info!r} != {expected.info!r}"
                )

        try:
            oracles = []
            for round_proof in proof.rounds:
                verify_openings(round_proof, mt_parameters)
                oracles.append(SuccinctRoundOracle(
                    round_proof.info,
                    round_proof.short_messages,
                    round_proof.queried_cosets,
                    round_proof.leaves,
                ))
            messages = MessagesCollection(
                sim.bookkeeper, oracles, sim.messages.verifier_rounds
            ).freeze()

            if not ldt.query_and_decide(ldt_namespace, ldt_parameter, sim.sponge,
                                        codewords, messages):
                return VerificationResult.reject("low-degree test failed")
            output = verifier.query_and_decide(
                sim.root, verifier_parameter, public_input, None, sim.sponge, messages
            )
        except MalformedProof as exc:
            return VerificationResult.reject(str(exc))

        if not all(oracle.fully_consumed for oracle in oracles):
            return VerificationResult.reject("proof contains unused query answers", output)
        if not output:
            return VerificationResult.reject("verifier decision rejected", output)

        logger.info("proof accepted for %s", protocol.name)
        return VerificationResult(True, output)
