"""
네임스페이스 레지스트리 (Namespace Registry)
=============================================

하나의 트랜스크립트 안에서 (하위) 프로토콜 인스턴스를 구분하는
계층적 식별자와 라운드 카운터를 관리한다.

**네임스페이스 트리**:
  루트(id=0)는 최상위 프로토콜 호출이다. 하위 프로토콜은
  new_namespace(parent)로 자식 네임스페이스를 만든다.
  id는 생성 순서대로 0, 1, 2, ... 로 부여되므로, prover 실행과
  verifier 시뮬레이션이 같은 순서로 네임스페이스를 만들면 같은 id를 얻는다.

**라운드 인덱스**:
  트랜스크립트는 모든 라운드를 전역 리스트에 순서대로 저장한다.
  북키퍼는 (네임스페이스, 방향, 로컬 인덱스) → 전역 인덱스 대응을 기록한다.

    namespace 0: prover [0, 1, 4]   verifier [0, 1]
    namespace 1: prover [2, 3]      verifier [2, 3, 4]

  로컬 인덱스는 네임스페이스마다 0부터 엄격히 증가하며,
  다른 네임스페이스의 라운드는 이름으로 조회할 수 없다.
"""

import enum
import logging

from zkiop.errors import MissingRound, NamespaceNotFound

logger = logging.getLogger(__name__)


class Side(enum.Enum):
    """라운드를 보낸 쪽."""
    PROVER = "prover"
    VERIFIER = "verifier"


class NameSpace:
    """(하위) 프로토콜 인스턴스의 식별자.

    속성:
        id: 트랜스크립트 안에서 유일한 정수 id
        parent_id: 부모 네임스페이스 id (루트는 None)
        trace: 디버깅용 레이블
    """

    def __init__(self, ns_id, parent_id=None, trace=""):
        self.id = ns_id
        self.parent_id = parent_id
        self.trace = trace

    @classmethod
    def root(cls, trace="root"):
        return cls(0, None, trace)

    @property
    def is_root(self):
        return self.parent_id is None

    def __eq__(self, other):
        return isinstance(other, NameSpace) and self.id == other.id

    def __hash__(self):
        return hash(("NameSpace", self.id))

    def __repr__(self):
        if self.trace:
            return f"NameSpace({self.id}, {self.trace!r})"
        return f"NameSpace({self.id})"


class MessageIndices:
    """한 네임스페이스의 prover/verifier 라운드 전역 인덱스."""

    def __init__(self):
        self.prover_rounds = []
        self.verifier_rounds = []

    def rounds(self, side):
        if side is Side.PROVER:
            return self.prover_rounds
        return self.verifier_rounds


class MessageBookkeeper:
    """네임스페이스 트리와 라운드 인덱스 대응을 기록한다."""

    def __init__(self, root_trace="root"):
        root = NameSpace.root(root_trace)
        self._namespaces = {root.id: root}
        self._indices = {root.id: MessageIndices()}
        self._children = {root.id: []}

    @property
    def root(self):
        return self._namespaces[0]

    def _indices_of(self, namespace):
        try:
            return self._indices[namespace.id]
        except KeyError:
            raise NamespaceNotFound(
                f"등록되지 않은 네임스페이스: {namespace!r}",
                data={"namespace": namespace.id},
            ) from None

    def contains(self, namespace):
        return namespace.id in self._indices

    def new_namespace(self, parent, trace=""):
        """parent 아래에 새 네임스페이스를 만든다.

        Raises:
            NamespaceNotFound: parent가 등록되지 않았을 때
        """
        self._indices_of(parent)
        ns = NameSpace(len(self._namespaces), parent.id, trace)
        self._namespaces[ns.id] = ns
        self._indices[ns.id] = MessageIndices()
        self._children[ns.id] = []
        self._children[parent.id].append(ns.id)
        logger.debug("new namespace %r under %r", ns, parent)
        return ns

    def namespace(self, ns_id):
        try:
            return self._namespaces[ns_id]
        except KeyError:
            raise NamespaceNotFound(
                f"등록되지 않은 네임스페이스 id: {ns_id}", data={"namespace": ns_id}
            ) from None

    def namespaces(self):
        """생성 순서대로 모든 네임스페이스."""
        return [self._namespaces[i] for i in sorted(self._namespaces)]

    def parent(self, namespace):
        self._indices_of(namespace)
        if namespace.parent_id is None:
            return None
        return self._namespaces[namespace.parent_id]

    def children(self, namespace):
        self._indices_of(namespace)
        return [self._namespaces[i] for i in self._children[namespace.id]]

    def next_round(self, namespace, side):
        """해당 방향의 다음 라운드가 받을 로컬 인덱스."""
        return len(self._indices_of(namespace).rounds(side))

    def attach_round(self, namespace, side, global_index):
        """전역 인덱스의 라운드를 네임스페이스에 붙이고 로컬 인덱스를 반환한다."""
        rounds = self._indices_of(namespace).rounds(side)
        if rounds and rounds[-1] >= global_index:
            raise ValueError("라운드 인덱스는 엄격히 증가해야 합니다")
        rounds.append(global_index)
        return len(rounds) - 1

    def round_index(self, namespace, side, local_index):
        """로컬 인덱스를 전역 인덱스로 변환한다.

        Raises:
            NamespaceNotFound: 네임스페이스가 등록되지 않았을 때
            MissingRound: 해당 라운드가 확정되지 않았을 때
        """
        rounds = self._indices_of(namespace).rounds(side)
        if local_index < 0 or local_index >= len(rounds):
            raise MissingRound(
                f"{namespace!r}의 {side.value} 라운드 {local_index}가 없습니다",
                data={"namespace": namespace.id, "side": side.value, "round": local_index},
            )
        return rounds[local_index]

    def num_rounds(self, namespace, side):
        return len(self._indices_of(namespace).rounds(side))

    def summary(self):
        """네임스페이스별 (부모 id, prover 전역 인덱스들, verifier 전역 인덱스들).

        두 트랜스크립트의 구조(라운드 배치 순서 포함)를 비교하는 데 사용한다.
        """
        return {
            ns.id: (
                ns.parent_id,
                tuple(self._indices[ns.id].prover_rounds),
                tuple(self._indices[ns.id].verifier_rounds),
            )
            for ns in self.namespaces()
        }
