"""
BCS Flask Blueprint — 데모 프로토콜 탐색기
===========================================

데모 프로토콜을 실행하고 트랜스크립트 구조와 검증 결과를 JSON으로
보여준다. 결과는 TinyDB에 "bcs.*" 키로 저장된다.

엔드포인트:
  GET  /bcs/          저장된 결과 전체
  POST /bcs/run       증명 생성 + 검증 (seed, tamper 선택)
  POST /bcs/check     커밋 단계 구조 검사 (하니스)
  GET  /bcs/summary   네임스페이스 / 라운드 / 챌린지 요약
  POST /bcs/clear     저장된 결과 삭제
"""

import logging

from flask import Blueprint, jsonify, request
from tinydb import Query

from zkiop.bcs.harness import check_commit_phase_correctness
from zkiop.bcs.prover import BCSProof
from zkiop.bcs.verifier import BCSVerifier
from zkiop.errors import BCSError
from zkiop.example import demo_ldt_parameters, demo_protocol
from zkiop.field import FR
from zkiop.ldt.rl_ldt import LinearCombinationLDT
from zkiop.sponge import Sha256Sponge

from bcs_serializers import (
    info_row,
    namespace_rows,
    proof_rows,
    result_dict,
    verifier_round_rows,
)

logger = logging.getLogger(__name__)

bcs_bp = Blueprint('bcs', __name__, url_prefix='/bcs')

DATA = Query()

# DB는 app.py에서 주입
DB = None

SPONGE_LABEL = b"zkiop-explorer"
TAMPER_MODES = ("leaf", "short", "digest")


def init_bcs_bp(db):
    """app.py에서 DB를 주입받는다."""
    global DB
    DB = db


# ─── DB 헬퍼 ───

def db_get(key):
    """DB에서 키로 데이터를 조회한다."""
    result = DB.search(DATA.type == key)
    if not result:
        return None
    return result[0].get("data")


def db_set(key, data):
    """DB에 키로 데이터를 저장한다."""
    DB.upsert({"type": key, "data": data}, DATA.type == key)


def db_remove_prefix(prefix):
    """prefix로 시작하는 모든 키를 삭제한다."""
    DB.remove(DATA.type.test(lambda t: t.startswith(prefix)))


def _request_params():
    params = request.get_json(silent=True) or request.form
    try:
        seed = int(params.get("seed", 0))
    except (TypeError, ValueError):
        return None, None, "seed는 정수여야 합니다"
    tamper = params.get("tamper") or None
    if tamper is not None and tamper not in TAMPER_MODES:
        return None, None, f"tamper는 {TAMPER_MODES} 중 하나여야 합니다"
    return seed, tamper, None


def tamper_proof(proof, mode):
    """라운드 0의 커밋된 값 하나를 변조한다."""
    target = proof.rounds[0]
    if mode == "leaf":
        target.leaves[0][0] = target.leaves[0][0] + FR(1)
    elif mode == "short":
        target.short_messages[0][0] = target.short_messages[0][0] + FR(1)
    elif mode == "digest":
        target.digest = bytes([target.digest[0] ^ 1]) + target.digest[1:]


# ──────────────────────────────────────────────────────────────
# 엔드포인트
# ──────────────────────────────────────────────────────────────

@bcs_bp.route("/")
def bcs_index():
    """저장된 결과 전체."""
    return jsonify({
        "run": db_get("bcs.run"),
        "check": db_get("bcs.check"),
        "summary": db_get("bcs.summary"),
    })


@bcs_bp.route("/run", methods=["POST"])
def bcs_run():
    """데모 프로토콜의 증명을 만들고 검증한다."""
    seed, tamper, error = _request_params()
    if error:
        return jsonify({"error": error}), 400

    pair = demo_protocol()
    ldt_param = demo_ldt_parameters()
    proof = BCSProof.generate(
        pair, LinearCombinationLDT, Sha256Sponge(SPONGE_LABEL), seed, None, None, ldt_param
    )
    if tamper:
        tamper_proof(proof, tamper)
    result = BCSVerifier.verify(
        pair, LinearCombinationLDT, Sha256Sponge(SPONGE_LABEL), proof, seed, None, ldt_param
    )

    data = {
        "seed": seed,
        "tamper": tamper,
        "rounds": proof_rows(proof),
        "num_queries": proof.num_queries,
        "result": result_dict(result),
    }
    db_set("bcs.run", data)
    return jsonify(data)


@bcs_bp.route("/check", methods=["POST"])
def bcs_check():
    """prover 트랜스크립트와 verifier 시뮬레이션을 비교한다."""
    seed, _, error = _request_params()
    if error:
        return jsonify({"error": error}), 400

    try:
        transcript, _ = check_commit_phase_correctness(
            demo_protocol(), LinearCombinationLDT, Sha256Sponge(SPONGE_LABEL),
            None, seed, None, demo_ldt_parameters(),
        )
    except BCSError as exc:
        logger.warning("commit phase check failed: %s", exc)
        data = {"seed": seed, "ok": False, "error": exc.to_dict()}
        db_set("bcs.check", data)
        return jsonify(data), 422

    summary = {
        "namespaces": namespace_rows(transcript.bookkeeper),
        "prover_rounds": [
            info_row(i, info) for i, info in enumerate(transcript.prover_round_infos())
        ],
        "verifier_rounds": verifier_round_rows(transcript.messages),
    }
    db_set("bcs.summary", summary)
    data = {"seed": seed, "ok": True}
    db_set("bcs.check", data)
    return jsonify(data)


@bcs_bp.route("/summary")
def bcs_summary():
    """마지막 구조 검사의 네임스페이스 / 라운드 / 챌린지 요약."""
    summary = db_get("bcs.summary")
    if summary is None:
        return jsonify({"error": "먼저 /bcs/check를 실행하세요"}), 404
    return jsonify(summary)


@bcs_bp.route("/clear", methods=["POST"])
def bcs_clear():
    """저장된 결과를 모두 지운다."""
    db_remove_prefix("bcs.")
    return jsonify({"cleared": True})
