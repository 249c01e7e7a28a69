"""
라운드 오라클 뷰 (Round Oracle View)
=====================================

prover 라운드 하나에 대한 접근자. 짧은 메시지는 그대로 읽고,
오라클 메시지는 위치 질의(query)로만 읽는다.

**질의 단위는 코셋**:
  국소화 l, 길이 N인 오라클은 M = N / 2^l 개의 코셋으로 커밋된다.
    위치 p  →  코셋 c = p mod M,  코셋 안의 순번 j = p // M
  query(positions)는 내부적으로 query_coset([c, ...])를 한 번 호출한다.

**질의 결과의 열 순서**:
  RS 부호 오라클(차수 상한이 있는 오라클)이 먼저, 일반 오라클이 나중.
  리프 역시 같은 순서로 이어붙인다.

**구현**:
  - RecordingRoundOracle: prover 측. 전체 데이터를 갖고 있으며
    질의된 코셋을 순서대로 기록한다 (증명에 담을 열기 목록).
  - SuccinctRoundOracle: verifier 측. 증명에 담긴 답을 기록된 순서대로
    돌려준다. 다른 코셋을 묻거나 답이 모자라면 MalformedProof.

사용 예시:
    >>> oracle = messages.prover_round(namespace, 0)
    >>> oracle.get_short_message(0)
    >>> oracle.query([123, 223])   # [[o0[123], o1[123]], [o0[223], o1[223]]]
"""

from zkiop.errors import MalformedProof, OracleQueryOutOfBounds


def coset_leaves(oracles, localization):
    """오라클 리스트를 코셋 단위 머클 리프로 묶는다.

    리프 c = [o₀[c], o₀[c+M], ..., o₁[c], o₁[c+M], ...]
    """
    if not oracles:
        return []
    length = len(oracles[0])
    num_cosets = length >> localization
    coset_size = 1 << localization
    leaves = []
    for c in range(num_cosets):
        leaf = []
        for oracle in oracles:
            leaf.extend(oracle[c + j * num_cosets] for j in range(coset_size))
        leaves.append(leaf)
    return leaves


def split_leaf(leaf, num_oracles, coset_size):
    """리프를 오라클별 코셋 값으로 나눈다."""
    return [leaf[k * coset_size:(k + 1) * coset_size] for k in range(num_oracles)]


class RoundOracle:
    """prover 라운드 뷰의 기본 클래스.

    형태(info)와 짧은 메시지만 갖는다. 시뮬레이션 트랜스크립트는
    이 기본 클래스를 그대로 저장하므로 오라클 질의는 지원하지 않는다.

    속성:
        info: ProverRoundMessageInfo
        short_messages: FR 리스트의 리스트
    """

    def __init__(self, info, short_messages=None):
        self.info = info
        self.short_messages = [list(m) for m in (short_messages or [])]

    @property
    def num_cosets(self):
        return self.info.num_cosets

    @property
    def coset_size(self):
        return self.info.coset_size

    def get_short_message(self, index):
        """index번째 짧은 메시지.

        Raises:
            OracleQueryOutOfBounds: 선언된 짧은 메시지 개수를 넘을 때
        """
        if index < 0 or index >= self.info.num_short_messages:
            raise OracleQueryOutOfBounds(
                f"짧은 메시지 인덱스 {index} (선언된 개수 {self.info.num_short_messages})",
                data={"index": index},
            )
        return self.short_messages[index]

    def _check_cosets(self, coset_indices):
        if self.info.num_oracles == 0:
            raise OracleQueryOutOfBounds("오라클이 없는 라운드는 질의할 수 없습니다")
        for c in coset_indices:
            if c < 0 or c >= self.num_cosets:
                raise OracleQueryOutOfBounds(
                    f"코셋 인덱스 {c} (코셋 개수 {self.num_cosets})",
                    data={"coset": c},
                )

    def query_coset(self, coset_indices):
        """코셋 단위 질의.

        Returns:
            list: 코셋마다 [오라클마다 [2^l 개의 값]]
        """
        raise NotImplementedError(f"{type(self).__name__}는 오라클 질의를 지원하지 않습니다")

    def query(self, positions):
        """위치 단위 질의. 위치마다 라운드의 모든 오라클 값을 반환한다.

        Raises:
            OracleQueryOutOfBounds: 위치가 오라클 길이 이상일 때, 라운드에 오라클이 없을 때
        """
        positions = list(positions)
        if self.info.num_oracles == 0:
            raise OracleQueryOutOfBounds("오라클이 없는 라운드는 질의할 수 없습니다")
        for p in positions:
            if p < 0 or p >= self.info.oracle_length:
                raise OracleQueryOutOfBounds(
                    f"위치 {p} (오라클 길이 {self.info.oracle_length})",
                    data={"position": p},
                )
        m = self.num_cosets
        answers = self.query_coset([p % m for p in positions])
        return [
            [values[p // m] for values in coset_answer]
            for p, coset_answer in zip(positions, answers)
        ]

    def __repr__(self):
        return f"{type(self).__name__}({self.info!r})"


class RecordingRoundOracle(RoundOracle):
    """prover 측 라운드 오라클: 전체 데이터 + 질의 기록.

    속성:
        oracles: RS 오라클 먼저, 일반 오라클 나중 순서의 코드워드 리스트
        tree: 라운드 커밋먼트 (오라클이 없으면 None)
        queried_cosets: 질의된 코셋 인덱스 (질의 순서, 중복 포함)
    """

    def __init__(self, info, short_messages, oracles, tree=None):
        super().__init__(info, short_messages)
        self.oracles = [list(o) for o in oracles]
        self.tree = tree
        self.queried_cosets = []

    @property
    def digest(self):
        return self.tree.root if self.tree is not None else None

    @property
    def reed_solomon_codewords(self):
        return self.oracles[:self.info.num_reed_solomon_codes]

    def leaf(self, coset_index):
        return self.tree.leaves[coset_index]

    def query_coset(self, coset_indices):
        coset_indices = list(coset_indices)
        self._check_cosets(coset_indices)
        self.queried_cosets.extend(coset_indices)
        return [
            split_leaf(self.leaf(c), self.info.num_oracles, self.coset_size)
            for c in coset_indices
        ]


class SuccinctRoundOracle(RoundOracle):
    """verifier 측 라운드 오라클: 증명에 담긴 답만 갖는다.

    답은 prover가 질의한 순서 그대로 저장되어 있으며, verifier의
    결정 로직이 같은 순서로 같은 코셋을 물어야 한다. 머클 경로는
    BCS verifier가 이 오라클을 만들기 전에 이미 검증한다.

    속성:
        queried_cosets: 증명에 기록된 코셋 인덱스 순서
        answers: 코셋마다의 리프 값
    """

    def __init__(self, info, short_messages, queried_cosets, answers):
        super().__init__(info, short_messages)
        if len(queried_cosets) != len(answers):
            raise MalformedProof("질의 코셋 수와 답의 수가 다릅니다")
        self.queried_cosets = list(queried_cosets)
        self.answers = [list(a) for a in answers]
        self.cursor = 0

    @property
    def fully_consumed(self):
        return self.cursor == len(self.answers)

    def query_coset(self, coset_indices):
        coset_indices = list(coset_indices)
        self._check_cosets(coset_indices)
        result = []
        for c in coset_indices:
            if self.cursor >= len(self.answers):
                raise MalformedProof("증명에 남은 질의 답이 없습니다", data={"coset": c})
            if self.queried_cosets[self.cursor] != c:
                raise MalformedProof(
                    f"질의 순서 불일치: 기대 {self.queried_cosets[self.cursor]}, 요청 {c}",
                    data={"coset": c},
                )
            result.append(
                split_leaf(self.answers[self.cursor], self.info.num_oracles, self.coset_size)
            )
            self.cursor += 1
        return result
