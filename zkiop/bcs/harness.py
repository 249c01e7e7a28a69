"""
커밋 단계 검증 하니스 (Verification Harness)
=============================================

prover 트랜스크립트와 verifier 시뮬레이션을 나란히 실행하여
두 트랜스크립트의 구조가 같은지 확인한다. 프로토콜을 새로 작성할 때
register_iop_structure가 prove와 맞는지 테스트하는 용도이다.

**비교 항목**:
  - 네임스페이스 트리와 네임스페이스별 라운드 배치
  - prover 라운드마다의 ProverRoundMessageInfo
  - verifier 라운드마다의 squeeze 종류와 크기
  - (check_commit_phase_correctness만) squeeze된 값

  하나라도 다르면 StructureMismatch를 던진다.

사용 예시:
    >>> check_commit_phase_correctness(pair, LinearCombinationLDT, Sha256Sponge(),
    ...                                None, seed, None, ldt_param)
"""

import logging

from zkiop.bcs.prover import run_commit_phase
from zkiop.bcs.verifier import simulate_commit_phase
from zkiop.errors import MalformedProof, StructureMismatch
from zkiop.iop.prover import verifier_param_for

logger = logging.getLogger(__name__)


def compare_transcripts(transcript, sim, compare_values=True):
    """두 트랜스크립트의 구조(와 값)를 비교한다.

    Raises:
        StructureMismatch: 처음 발견된 차이
    """
    real_layout = transcript.bookkeeper.summary()
    sim_layout = sim.bookkeeper.summary()
    if real_layout != sim_layout:
        raise StructureMismatch(
            "네임스페이스 구조가 다릅니다",
            data={"prover": repr(real_layout), "simulation": repr(sim_layout)},
        )

    for index, (real, simulated) in enumerate(
        zip(transcript.prover_round_infos(), sim.prover_round_infos())
    ):
        if real != simulated:
            raise StructureMismatch(
                f"prover 라운드 {index}: 실제 {real!r}, 선언 {simulated!r}",
                data={"round": index},
            )

    for index, (real, simulated) in enumerate(
        zip(transcript.verifier_round_shapes(), sim.verifier_round_shapes())
    ):
        if real != simulated:
            raise StructureMismatch(
                f"verifier 라운드 {index}: 실제 {real}, 선언 {simulated}",
                data={"round": index},
            )

    if compare_values:
        for index, (real, simulated) in enumerate(
            zip(transcript.messages.verifier_rounds, sim.messages.verifier_rounds)
        ):
            if real != simulated:
                raise StructureMismatch(
                    f"verifier 라운드 {index}의 챌린지 값이 다릅니다",
                    data={"round": index},
                )


def _run_both(protocol, ldt, sponge, prover_parameter, public_input, private_input,
              ldt_parameter, mt_parameters, with_commitments):
    transcript, _, _ = run_commit_phase(
        protocol.prover, ldt, sponge.copy(), public_input, private_input,
        prover_parameter, ldt_parameter, mt_parameters,
    )
    received = transcript.commitments() if with_commitments else None
    try:
        sim, _, _ = simulate_commit_phase(
            protocol.verifier, ldt, sponge.copy(),
            verifier_param_for(prover_parameter), ldt_parameter, received,
        )
    except MalformedProof as exc:
        raise StructureMismatch(f"선언된 구조가 prover 커밋먼트와 맞지 않습니다: {exc}") from exc
    if sim.has_unreceived_rounds():
        raise StructureMismatch(
            f"prover 라운드 {len(transcript.messages.prover_rounds)}개, "
            f"선언 {len(sim.messages.prover_rounds)}개"
        )
    return transcript, sim


def check_commit_phase_correctness(protocol, ldt, sponge, prover_parameter, public_input,
                                   private_input, ldt_parameter, mt_parameters=None):
    """prover와 시뮬레이션의 구조와 챌린지 값이 같은지 확인한다.

    시뮬레이션은 prover의 커밋먼트를 흡수하므로 챌린지 값까지 같아야 한다.

    Returns:
        tuple: (Transcript, SimulationTranscript)
    """
    transcript, sim = _run_both(
        protocol, ldt, sponge, prover_parameter, public_input, private_input,
        ldt_parameter, mt_parameters, with_commitments=True,
    )
    compare_transcripts(transcript, sim, compare_values=True)
    logger.debug("commit phase of %s matches its simulation", protocol.name)
    return transcript, sim


def check_structure(protocol, ldt, sponge, prover_parameter, public_input,
                    private_input, ldt_parameter, mt_parameters=None):
    """prover 데이터 없이 시뮬레이션한 구조가 prover와 같은지 확인한다."""
    transcript, sim = _run_both(
        protocol, ldt, sponge, prover_parameter, public_input, private_input,
        ldt_parameter, mt_parameters, with_commitments=False,
    )
    if len(transcript.messages.prover_rounds) != len(sim.messages.prover_rounds):
        raise StructureMismatch(
            f"prover 라운드 {len(transcript.messages.prover_rounds)}개, "
            f"선언 {len(sim.messages.prover_rounds)}개"
        )
    compare_transcripts(transcript, sim, compare_values=False)
    return transcript, sim
