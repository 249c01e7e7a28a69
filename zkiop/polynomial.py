"""
IOP 기반 모듈: 다항식(Polynomial) 클래스 및 FFT
===============================================

prover가 다항식 오라클을 보낼 때와 FRI 저차 테스트에서 사용하는
다항식 연산을 제공한다.

**Polynomial 클래스**:
  계수(coefficient) 표현 기반 다항식. p(x) = c₀ + c₁·x + c₂·x² + ...
  Horner 평가와 영 다항식 판정만 지원한다. 산술은 코드워드(평가값)
  위에서 직접 수행한다.

**FFT/IFFT (Number Theoretic Transform)**:
  유한체 위의 다항식을 평가 표현 ↔ 계수 표현으로 변환.
  재귀적 Cooley-Tukey radix-2 알고리즘을 사용한다.

**라그랑주 보간 평가 (interpolate_at)**:
  FRI 접기(folding)의 핵심. 코셋 위의 값들을 보간한 다항식을
  챌린지 점 α에서 바로 평가한다.

사용 예시:
    >>> from zkiop.polynomial import Polynomial, fft, ifft
    >>> p = Polynomial([FR(1), FR(2), FR(3)])  # 1 + 2x + 3x²
    >>> p.evaluate(FR(2))  # 1 + 4 + 12 = FR(17)
"""

from zkiop.field import FR


# ─────────────────────────────────────────────────────────────────────
# Polynomial 클래스
# ─────────────────────────────────────────────────────────────────────

class Polynomial:
    """유한체 FR 위의 다항식.

    계수 리스트로 표현: coeffs = [c₀, c₁, c₂, ...] → c₀ + c₁x + c₂x² + ...

    IOP에서의 역할:
    - prover의 다항식 오라클: 코드워드 도메인 위에서 평가되어 커밋됨
    - FRI 마지막 라운드: 접힌 다항식의 계수를 짧은 메시지로 전송

    예시:
        >>> p = Polynomial([FR(1), FR(2), FR(0)])  # 1 + 2x
        >>> p.degree                                # 1
    """

    def __init__(self, coeffs=None):
        """다항식 생성.

        Args:
            coeffs: FR 원소(또는 정수)의 리스트 [c₀, c₁, ...].
                    None이면 영 다항식(0)을 생성한다.
        """
        if coeffs is None:
            self.coeffs = [FR(0)]
        else:
            self.coeffs = [c if isinstance(c, FR) else FR(c) for c in coeffs]
            if not self.coeffs:
                self.coeffs = [FR(0)]
        self._trim()

    def _trim(self):
        """최고차 계수가 0인 항을 제거하여 정규화한다."""
        while len(self.coeffs) > 1 and self.coeffs[-1] == FR(0):
            self.coeffs.pop()

    @property
    def degree(self):
        """다항식의 차수. 영 다항식의 차수는 0으로 정의한다."""
        return len(self.coeffs) - 1

    def is_zero(self):
        """영 다항식인지 확인."""
        return len(self.coeffs) == 1 and self.coeffs[0] == FR(0)

    def evaluate(self, point):
        """다항식을 주어진 점에서 평가한다 (Horner's method).

        Args:
            point: 평가할 FR 원소

        Returns:
            FR: p(point) 값
        """
        if not isinstance(point, FR):
            point = FR(point)
        result = FR(0)
        for coeff in reversed(self.coeffs):
            result = result * point + coeff
        return result

    def __eq__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        if not isinstance(other, Polynomial):
            return False
        return self.coeffs == other.coeffs

    @classmethod
    def zero(cls):
        return cls([FR(0)])

    @classmethod
    def from_coefficients(cls, coeffs):
        """계수 리스트에서 다항식을 만든다. 정수 계수도 허용한다.

        예시:
            >>> Polynomial.from_coefficients([0x12345, 0x23456])
        """
        return cls(list(coeffs))


# ─────────────────────────────────────────────────────────────────────
# FFT / IFFT (Number Theoretic Transform)
# ─────────────────────────────────────────────────────────────────────

def fft(coeffs, omega):
    """Fast Fourier Transform (NTT): 계수 → 평가값.

    입력 다항식 p(x) = c₀ + c₁x + ... + c_{n-1}x^{n-1}을
    n개의 단위근 {1, ω, ω², ..., ω^{n-1}}에서 평가한다.

    Args:
        coeffs: [c₀, c₁, ..., c_{n-1}] FR 원소 리스트 (길이는 2의 거듭제곱)
        omega: n차 원시 단위근

    Returns:
        list[FR]: [p(1), p(ω), p(ω²), ..., p(ω^{n-1})]
    """
    n = len(coeffs)
    if n == 1:
        return [coeffs[0] if isinstance(coeffs[0], FR) else FR(coeffs[0])]

    even = [coeffs[i] for i in range(0, n, 2)]
    odd = [coeffs[i] for i in range(1, n, 2)]

    # ω²는 n/2차 단위근
    omega_sq = omega * omega
    even_vals = fft(even, omega_sq)
    odd_vals = fft(odd, omega_sq)

    # 버터플라이 결합
    result = [FR(0)] * n
    omega_k = FR(1)
    half = n // 2
    for k in range(half):
        t = omega_k * odd_vals[k]
        result[k] = even_vals[k] + t
        result[k + half] = even_vals[k] - t
        omega_k = omega_k * omega

    return result


def ifft(evals, omega):
    """Inverse FFT (INTT): 평가값 → 계수.

    역 단위근 ω^{-1}로 FFT를 수행한 후 n으로 나눈다.

    Args:
        evals: [p(1), p(ω), ..., p(ω^{n-1})] FR 원소 리스트
        omega: n차 원시 단위근

    Returns:
        list[FR]: [c₀, c₁, ..., c_{n-1}] 계수 리스트
    """
    n = len(evals)
    omega_inv = FR(1) / omega
    coeffs = fft(evals, omega_inv)
    n_inv = FR(1) / FR(n)
    return [c * n_inv for c in coeffs]


# ─────────────────────────────────────────────────────────────────────
# 라그랑주 보간 (Lagrange Interpolation)
# ─────────────────────────────────────────────────────────────────────

def interpolate_at(xs, ys, point):
    """점 (xᵢ, yᵢ)를 보간하는 다항식 P를 point에서 평가한다.

    P(z) = Σᵢ yᵢ · ∏_{j≠i} (z - xⱼ) / (xᵢ - xⱼ)

    FRI에서 크기 2^l 코셋 위의 값 f(x·ζᵏ)를 보간하면
    P(α) = f'(x^{2^l})가 되어 한 번에 접기 결과를 얻는다.

    Args:
        xs: 서로 다른 FR 원소 리스트
        ys: xs와 같은 길이의 FR 원소 리스트
        point: 평가 점 z

    Returns:
        FR: P(point)

    Raises:
        ValueError: xs와 ys의 길이가 다르거나 xs에 중복이 있을 때
    """
    if len(xs) != len(ys):
        raise ValueError("보간 점과 값의 개수가 다릅니다")
    if not isinstance(point, FR):
        point = FR(point)

    # point가 보간 점 중 하나와 같으면 해당 값을 그대로 반환
    for x, y in zip(xs, ys):
        if x == point:
            return y

    result = FR(0)
    for i, (xi, yi) in enumerate(zip(xs, ys)):
        numerator = FR(1)
        denominator = FR(1)
        for j, xj in enumerate(xs):
            if j == i:
                continue
            numerator = numerator * (point - xj)
            denominator = denominator * (xi - xj)
        if denominator == FR(0):
            raise ValueError("보간 점에 중복이 있습니다")
        result = result + yi * numerator / denominator
    return result
