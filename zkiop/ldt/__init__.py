"""
저차 테스트 (Low-Degree Test) 계약
===================================

차수 상한(degree bound)이 선언된 RS 오라클이 실제로 저차 다항식의
평가값에 가까운지 검사하는 하위 프로토콜. BCS 변환은 최상위 프로토콜의
커밋 단계가 끝난 뒤 루트의 자식 네임스페이스에서 LDT를 실행한다.

**계약 (클래스 메서드)**:
  codeword_domain(param)        RS 오라클이 평가되는 도메인 (없으면 None)
  localization_param(param)     RS 오라클의 국소화 파라미터
  prove(namespace, param, transcript, codewords)
  register_iop_structure(namespace, param, transcript, codewords)
  query_and_decide(namespace, param, sponge, codewords, messages) → bool

  codewords는 RS 오라클을 가진 라운드의 MsgRoundRef 리스트이다.

**구현**:
  - NoLDT: 저차 테스트를 하지 않는다. RS 오라클을 보내면 StructureMismatch.
  - LinearCombinationLDT (rl_ldt): 무작위 선형결합 + FRI
"""

import logging

from zkiop.errors import StructureMismatch

logger = logging.getLogger(__name__)


class LDT:
    """저차 테스트 하위 프로토콜의 기본 클래스."""

    @classmethod
    def codeword_domain(cls, param):
        raise NotImplementedError

    @classmethod
    def localization_param(cls, param):
        raise NotImplementedError

    @classmethod
    def prove(cls, namespace, param, transcript, codewords):
        raise NotImplementedError

    @classmethod
    def register_iop_structure(cls, namespace, param, transcript, codewords):
        raise NotImplementedError

    @classmethod
    def query_and_decide(cls, namespace, param, sponge, codewords, messages):
        raise NotImplementedError


class NoLDT(LDT):
    """차수 상한이 있는 오라클이 없는 프로토콜을 위한 LDT."""

    @classmethod
    def codeword_domain(cls, param):
        return None

    @classmethod
    def localization_param(cls, param):
        return None

    @classmethod
    def _reject_codewords(cls, codewords):
        if codewords:
            raise StructureMismatch(
                "NoLDT는 차수 상한이 있는 오라클을 지원하지 않습니다",
                data={"rounds": len(codewords)},
            )

    @classmethod
    def prove(cls, namespace, param, transcript, codewords):
        cls._reject_codewords(codewords)

    @classmethod
    def register_iop_structure(cls, namespace, param, transcript, codewords):
        cls._reject_codewords(codewords)

    @classmethod
    def query_and_decide(cls, namespace, param, sponge, codewords, messages):
        cls._reject_codewords(codewords)
        return True
