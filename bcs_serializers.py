"""
BCS 탐색기 표시 헬퍼
=====================

트랜스크립트, 증명, 검증 결과를 TinyDB에 저장하고 JSON으로
보여주기 위한 dict/문자열 변환. 증명이나 파라미터를 다시 읽어
들이는 역직렬화는 제공하지 않는다.
"""

from zkiop.bcs.verifier import VerificationResult
from zkiop.iop.message import Bits, Bytes, FieldElements


def fr_short(val):
    """FR → 축약 문자열 (UI 표시용)"""
    if val is None:
        return "None"
    s = str(int(val))
    if len(s) <= 10:
        return s
    return s[:4] + "..." + s[-4:]


def digest_short(digest):
    """머클 루트 → 축약 16진 문자열"""
    if digest is None:
        return "None"
    h = digest.hex()
    return h[:8] + "..." + h[-8:]


def info_row(index, info):
    row = {"round": index}
    row.update(info.to_dict())
    return row


def namespace_rows(bookkeeper):
    """네임스페이스 트리 → 행 리스트"""
    rows = []
    for ns_id, (parent_id, prover_rounds, verifier_rounds) in bookkeeper.summary().items():
        rows.append({
            "id": ns_id,
            "trace": bookkeeper.namespace(ns_id).trace,
            "parent": parent_id,
            "prover_rounds": list(prover_rounds),
            "verifier_rounds": list(verifier_rounds),
        })
    return rows


def verifier_message_row(message):
    if isinstance(message, FieldElements):
        preview = [fr_short(v) for v in message.value]
    elif isinstance(message, Bytes):
        preview = message.value.hex()
    elif isinstance(message, Bits):
        preview = "".join("1" if b else "0" for b in message.value)
    else:
        preview = repr(message)
    return {"kind": message.kind, "size": len(message), "value": preview}


def verifier_round_rows(messages):
    return [
        {"round": index, "messages": [verifier_message_row(m) for m in rnd]}
        for index, rnd in enumerate(messages.verifier_rounds)
    ]


def proof_rows(proof):
    """증명 → 라운드별 행 리스트"""
    rows = []
    for index, round_proof in enumerate(proof.rounds):
        row = info_row(index, round_proof.info)
        row.update({
            "digest": digest_short(round_proof.digest),
            "short_messages": [[fr_short(v) for v in m] for m in round_proof.short_messages],
            "queried_cosets": list(round_proof.queried_cosets),
            "num_paths": len(round_proof.paths),
        })
        rows.append(row)
    return rows


def result_dict(result):
    if isinstance(result, VerificationResult):
        return result.to_dict()
    return {"accepted": bool(result), "reason": ""}
