"""
Fiat-Shamir 스펀지 (Cryptographic Sponge)
==========================================

공개 동전(public-coin) IOP를 비대화식으로 변환하기 위한 스펀지.

**역할**:
  - absorb: prover가 커밋한 데이터(머클 루트, 짧은 메시지)를 흡수
  - squeeze: 지금까지 흡수한 모든 데이터에 결정론적으로 의존하는
    verifier 챌린지(필드 원소, 바이트, 비트)를 생성

  Prover와 Verifier가 같은 순서로 absorb/squeeze를 호출하면
  같은 챌린지를 얻는다.

**Sha256Sponge 구성**:
  32바이트 상태를 유지하는 해시 체인이다.
  - absorb(data):   state ← H("absorb" ‖ state ‖ len ‖ data)
  - squeeze(n):     출력 블록 H("squeeze" ‖ state ‖ counter)를 이어붙이고
                    state ← H("ratchet" ‖ state ‖ n) 으로 갱신
  squeeze 이후 상태가 갱신되므로 연속 호출은 서로 다른 값을 준다.

**필드 원소 크기 (FieldElementSize)**:
  FULL: 전체 필드 원소 (48바이트를 p로 축소, 편향 ≈ 2^-128)
  truncated(k): 하위 k비트만 사용하는 작은 챌린지

사용 예시:
    >>> sponge = Sha256Sponge(b"zkiop")
    >>> sponge.absorb(b"root")
    >>> alpha, = sponge.squeeze_field_elements([FieldElementSize.FULL])
"""

import hashlib

from zkiop.field import FR, CURVE_ORDER, to_bytes


class FieldElementSize:
    """squeeze할 필드 원소 하나의 크기.

    num_bits가 None이면 전체 필드 원소(FULL)를 의미한다.
    """

    def __init__(self, num_bits=None):
        if num_bits is not None and not 0 < num_bits < CURVE_ORDER.bit_length():
            raise ValueError(f"잘못된 비트 수: {num_bits}")
        self.num_bits = num_bits

    @classmethod
    def truncated(cls, num_bits):
        return cls(num_bits)

    @property
    def is_full(self):
        return self.num_bits is None

    def __eq__(self, other):
        return isinstance(other, FieldElementSize) and self.num_bits == other.num_bits

    def __hash__(self):
        return hash(("FieldElementSize", self.num_bits))

    def __repr__(self):
        if self.is_full:
            return "Full"
        return f"Truncated({self.num_bits})"


FieldElementSize.FULL = FieldElementSize()


def encode_absorb(data):
    """absorb 입력을 바이트열로 인코딩한다.

    허용 타입: bytes, FR, int(필드로 축소), 그리고 이들의 리스트/튜플.
    리스트는 원소 개수를 앞에 붙여 경계를 명확히 한다.
    """
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, FR):
        return to_bytes(data)
    if isinstance(data, bool):
        raise TypeError("bool은 흡수할 수 없습니다")
    if isinstance(data, int):
        return to_bytes(FR(data))
    if isinstance(data, (list, tuple)):
        parts = [len(data).to_bytes(8, "big")]
        for item in data:
            encoded = encode_absorb(item)
            parts.append(len(encoded).to_bytes(8, "big"))
            parts.append(encoded)
        return b"".join(parts)
    raise TypeError(f"흡수할 수 없는 타입: {type(data).__name__}")


class Sponge:
    """스펀지 인터페이스.

    트랜스크립트 드라이버는 이 인터페이스만 사용하므로
    다른 해시/순열 기반 구현으로 교체할 수 있다.
    """

    def absorb(self, data):
        raise NotImplementedError

    def squeeze_bytes(self, num_bytes):
        raise NotImplementedError

    def copy(self):
        """현재 상태를 복제한 독립적인 스펀지를 반환한다."""
        raise NotImplementedError

    def squeeze_bits(self, num_bits):
        """num_bits개의 비트를 squeeze한다 (각 바이트의 LSB부터).

        Returns:
            list[bool]
        """
        if num_bits < 0:
            raise ValueError("비트 수는 음수가 될 수 없습니다")
        if num_bits == 0:
            return []
        raw = self.squeeze_bytes((num_bits + 7) // 8)
        bits = []
        for byte in raw:
            for k in range(8):
                bits.append(bool((byte >> k) & 1))
        return bits[:num_bits]

    def squeeze_field_elements(self, sizes):
        """sizes의 각 항목마다 필드 원소 하나를 squeeze한다.

        Args:
            sizes: FieldElementSize 리스트

        Returns:
            list[FR]
        """
        result = []
        for size in sizes:
            if size.is_full:
                raw = self.squeeze_bytes(48)
                result.append(FR(int.from_bytes(raw, "big") % CURVE_ORDER))
            else:
                bits = self.squeeze_bits(size.num_bits)
                value = 0
                for k, bit in enumerate(bits):
                    if bit:
                        value |= 1 << k
                result.append(FR(value))
        return result


class Sha256Sponge(Sponge):
    """SHA-256 해시 체인 기반 스펀지.

    속성:
        state: 현재 32바이트 상태
    """

    def __init__(self, label=b"zkiop", hash_name="sha256"):
        if hash_name not in hashlib.algorithms_guaranteed:
            raise ValueError(f"지원하지 않는 해시 함수: {hash_name}")
        if isinstance(label, str):
            label = label.encode("utf-8")
        self.hash_name = hash_name
        self.state = self._hash(b"init", label)

    def _hash(self, tag, *parts):
        h = hashlib.new(self.hash_name)
        h.update(tag)
        for part in parts:
            h.update(part)
        return h.digest()

    def absorb(self, data):
        encoded = encode_absorb(data)
        self.state = self._hash(
            b"absorb", self.state, len(encoded).to_bytes(8, "big"), encoded
        )

    def squeeze_bytes(self, num_bytes):
        if num_bytes < 0:
            raise ValueError("바이트 수는 음수가 될 수 없습니다")
        out = b""
        counter = 0
        while len(out) < num_bytes:
            out += self._hash(b"squeeze", self.state, counter.to_bytes(8, "big"))
            counter += 1
        # 다음 squeeze가 다른 값을 주도록 상태를 갱신 (ratchet)
        self.state = self._hash(b"ratchet", self.state, num_bytes.to_bytes(8, "big"))
        return out[:num_bytes]

    def copy(self):
        clone = Sha256Sponge.__new__(Sha256Sponge)
        clone.hash_name = self.hash_name
        clone.state = self.state
        return clone

    def __repr__(self):
        return f"Sha256Sponge(state={self.state.hex()[:16]}…)"
