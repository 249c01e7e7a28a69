"""
머클 트리 커밋먼트 (Merkle Tree Commitment)
============================================

prover의 오라클 메시지를 위치 질의 가능한(position-queryable) 형태로
바인딩하는 커밋먼트.

**리프 구성**:
  한 라운드의 모든 오라클을 국소화 코셋 단위로 묶는다.
  리프 c = [oracle₀의 코셋 c 값들] ‖ [oracle₁의 코셋 c 값들] ‖ ...
  리프 하나를 열면 코셋 전체(2^l개 위치)가 한 번에 공개된다.

**해시**:
  - 리프:  H(0x00 ‖ 원소 개수 ‖ 32바이트 원소들)
  - 내부:  H(0x01 ‖ left ‖ right)
  태그로 리프/내부 노드를 구분하여 두 번째 원상(second preimage) 혼동을 막는다.

**열기 (open)**:
  각 리프 인덱스에 대해 형제(sibling) 해시 경로를 반환한다.
  검증은 MerkleTreeParameters.verify_path로 루트까지 재계산한다.

사용 예시:
    >>> params = MerkleTreeParameters()
    >>> tree = MerkleTree([[FR(1), FR(2)], [FR(3), FR(4)]], params)
    >>> path = tree.open([1])[1]
    >>> params.verify_path(tree.root, [FR(3), FR(4)], 1, path)  # True
"""

import hashlib

from zkiop.field import elements_to_bytes


class MerkleTreeParameters:
    """머클 트리 해시 설정.

    속성:
        hash_name: hashlib 알고리즘 이름 (기본 sha256)
    """

    def __init__(self, hash_name="sha256"):
        if hash_name not in hashlib.algorithms_guaranteed:
            raise ValueError(f"지원하지 않는 해시 함수: {hash_name}")
        self.hash_name = hash_name

    def hash_leaf(self, values):
        h = hashlib.new(self.hash_name)
        h.update(b"\x00")
        h.update(len(values).to_bytes(8, "big"))
        h.update(elements_to_bytes(values))
        return h.digest()

    def hash_nodes(self, left, right):
        h = hashlib.new(self.hash_name)
        h.update(b"\x01")
        h.update(left)
        h.update(right)
        return h.digest()

    def verify_path(self, root, leaf_values, index, path):
        """리프 값과 인증 경로로 루트를 재계산하여 비교한다.

        Args:
            root: 커밋된 루트 다이제스트
            leaf_values: 리프에 담긴 FR 원소 리스트
            index: 리프 인덱스
            path: 아래에서 위로 정렬된 형제 해시 리스트

        Returns:
            bool: 경로가 유효하면 True
        """
        if index < 0 or index >= (1 << len(path)):
            return False
        acc = self.hash_leaf(leaf_values)
        idx = index
        for sibling in path:
            if idx % 2 == 0:
                acc = self.hash_nodes(acc, sibling)
            else:
                acc = self.hash_nodes(sibling, acc)
            idx //= 2
        return acc == root

    def __eq__(self, other):
        return isinstance(other, MerkleTreeParameters) and self.hash_name == other.hash_name

    def __repr__(self):
        return f"MerkleTreeParameters(hash_name={self.hash_name!r})"


class MerkleTree:
    """FR 원소 리스트를 리프로 하는 이진 머클 트리.

    리프 개수가 2의 거듭제곱이 아니면 마지막 리프 해시를 복제하여 채운다.

    속성:
        levels: levels[0]은 리프 해시, levels[-1]은 [root]
        leaves: 원래 리프 값 리스트
    """

    def __init__(self, leaves, parameters):
        if not leaves:
            raise ValueError("리프가 없는 머클 트리는 만들 수 없습니다")
        self.parameters = parameters
        self.leaves = [list(leaf) for leaf in leaves]

        current = [parameters.hash_leaf(leaf) for leaf in self.leaves]
        while len(current) & (len(current) - 1):
            current.append(current[-1])
        self.levels = [current]
        while len(current) > 1:
            current = [
                parameters.hash_nodes(current[i], current[i + 1])
                for i in range(0, len(current), 2)
            ]
            self.levels.append(current)

    @property
    def root(self):
        return self.levels[-1][0]

    @property
    def num_leaves(self):
        return len(self.leaves)

    def path(self, index):
        """리프 index의 인증 경로 (형제 해시, 아래→위)."""
        if index < 0 or index >= self.num_leaves:
            raise IndexError(f"리프 인덱스 범위 초과: {index}")
        path = []
        idx = index
        for level in self.levels[:-1]:
            path.append(level[idx ^ 1])
            idx //= 2
        return path

    def open(self, indices):
        """여러 리프를 연다.

        Returns:
            dict[int, list[bytes]]: 중복을 제거한 리프 인덱스 → 인증 경로
        """
        return {index: self.path(index) for index in sorted(set(indices))}
