"""
IOP 기반 모듈: 유한체(Finite Field)
====================================

트랜스크립트, 오라클, LDT 전체에서 사용되는 기본 산술 단위를 정의한다.

**유한체 FR**:
  bn128 타원곡선의 스칼라 필드. 모든 prover 메시지(짧은 메시지, 오라클
  메시지)와 verifier 챌린지는 FR 원소의 리스트이다.
  - 위수(order) p ≈ 2^254, 소수체(prime field)
  - p - 1 = 2^28 × m (m은 홀수) → 최대 2^28차 단위근을 지원

**직렬화**:
  스펀지 흡수(absorb)와 머클 리프 해싱을 위해 FR 원소를 32바이트
  빅엔디안으로 고정 폭 인코딩한다.

사용 예시:
    >>> from zkiop.field import FR, to_bytes
    >>> a = FR(3)
    >>> b = a * a          # FR(9)
    >>> to_bytes(b)[-1]    # 9
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 등의 필드 연산을 제공한다.

    예시:
        >>> x = FR(3)
        >>> x * x          # FR(9)
        >>> FR(1) / FR(3)   # 3의 모듈러 역원
    """
    field_modulus = bn128.curve_order


# 곡선 위수 (필드 크기)
CURVE_ORDER = bn128.curve_order

# FR 원소 하나의 직렬화 폭 (바이트)
FIELD_BYTES = 32


def to_bytes(value):
    """FR 원소를 32바이트 빅엔디안으로 직렬화한다."""
    return (int(value) % CURVE_ORDER).to_bytes(FIELD_BYTES, "big")


def elements_to_bytes(values):
    """FR 원소 리스트를 이어붙인 바이트열로 직렬화한다."""
    return b"".join(to_bytes(v) for v in values)


def from_bytes_mod_order(data):
    """바이트열을 리틀엔디안 정수로 읽어 FR로 축소한다.

    verifier의 바이트 챌린지에서 필드 원소를 유도할 때 사용한다.

    Args:
        data: 임의 길이의 바이트열

    Returns:
        FR: int(data) mod p
    """
    return FR(int.from_bytes(data, "little") % CURVE_ORDER)


def is_power_of_two(n):
    return n >= 1 and (n & (n - 1)) == 0


def log2(n):
    """2의 거듭제곱 n의 밑이 2인 로그."""
    if not is_power_of_two(n):
        raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")
    return n.bit_length() - 1


# ─────────────────────────────────────────────────────────────────────
# 단위근 (Roots of Unity)
# ─────────────────────────────────────────────────────────────────────

def get_root_of_unity(n):
    """n차 원시 단위근(primitive n-th root of unity) ω를 반환한다.

    생성자 g = FR(5)를 사용하여 ω = g^((p-1)/n)으로 계산한다.

    Args:
        n: 단위근의 차수 (2의 거듭제곱이어야 하며, ≤ 2^28)

    Returns:
        FR: n차 원시 단위근

    Raises:
        ValueError: n이 2의 거듭제곱이 아니거나 2^28을 초과할 때

    예시:
        >>> omega = get_root_of_unity(4)
        >>> omega ** 4 == FR(1)  # True
        >>> omega ** 2 != FR(1)  # True (원시 단위근)
    """
    if not is_power_of_two(n):
        raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")
    if n > (1 << 28):
        raise ValueError(f"n은 2^28 이하여야 합니다: {n}")
    if n == 1:
        return FR(1)

    # ω = g^((p-1)/n)이면 ω^n = g^(p-1) = 1 (페르마 소정리)
    g = FR(5)
    exponent = (CURVE_ORDER - 1) // n
    return g ** exponent


def get_roots_of_unity(n):
    """n개의 단위근 리스트 [1, ω, ω², ..., ω^(n-1)]을 반환한다."""
    omega = get_root_of_unity(n)
    roots = []
    current = FR(1)
    for _ in range(n):
        roots.append(current)
        current = current * omega
    return roots
