"""
IOP 기반 모듈: Radix-2 코셋 도메인
===================================

저차 테스트(LDT)의 코드워드가 정의되는 평가 도메인.

**코셋 도메인**:
  D = {g·ωⁱ : 0 ≤ i < N}  (ω는 N차 원시 단위근, g는 오프셋)
  위치 i의 원소는 g·ωⁱ 이다.

**국소화(localization)와 코셋**:
  국소화 파라미터 l에 대해 도메인은 M = N / 2^l 개의 코셋으로 나뉜다.
  코셋 c = {위치 c + j·M : 0 ≤ j < 2^l}
  ω^M은 2^l차 단위근이므로 한 코셋의 원소들은 x·ζʲ 꼴이고,
  모두 같은 2^l 거듭제곱 x^{2^l}을 가진다.

**접기(folding)**:
  D를 2^l로 접으면 D' = {g^{2^l}·(ω^{2^l})ᶜ : 0 ≤ c < M}.
  D의 코셋 c는 D'의 위치 c로 대응된다.

사용 예시:
    >>> domain = Radix2CosetDomain(128, FR(1))
    >>> domain.element(3) == domain.generator ** 3   # True
    >>> domain.fold(1).size                          # 64
"""

from zkiop.field import FR, get_root_of_unity, get_roots_of_unity, is_power_of_two, log2
from zkiop.polynomial import Polynomial, fft, ifft


class Radix2CosetDomain:
    """크기가 2의 거듭제곱인 곱셈 부분군의 코셋.

    속성:
        size: 도메인 크기 N
        offset: 코셋 오프셋 g
        generator: N차 원시 단위근 ω
    """

    def __init__(self, size, offset=None):
        if not is_power_of_two(size):
            raise ValueError(f"도메인 크기는 2의 거듭제곱이어야 합니다: {size}")
        if offset is None:
            offset = FR(1)
        if not isinstance(offset, FR):
            offset = FR(offset)
        if offset == FR(0):
            raise ValueError("코셋 오프셋은 0이 될 수 없습니다")
        self.size = size
        self.offset = offset
        self.generator = get_root_of_unity(size)

    @classmethod
    def new_radix2_coset(cls, size, offset):
        return cls(size, offset)

    @property
    def log_size(self):
        return log2(self.size)

    def element(self, index):
        """위치 index의 도메인 원소 g·ω^index."""
        return self.offset * self.generator ** (index % self.size)

    def elements(self):
        """[g, g·ω, ..., g·ω^{N-1}]"""
        return [self.offset * root for root in get_roots_of_unity(self.size)]

    def num_cosets(self, localization):
        """국소화 l일 때의 코셋 개수 M = N / 2^l."""
        if localization > self.log_size:
            raise ValueError(
                f"국소화 파라미터 {localization}가 도메인 크기 {self.size}를 초과합니다"
            )
        return self.size >> localization

    def coset_positions(self, coset_index, localization):
        """코셋 c에 속하는 위치 [c, c + M, c + 2M, ...]."""
        m = self.num_cosets(localization)
        return [coset_index + j * m for j in range(1 << localization)]

    def coset_elements(self, coset_index, localization):
        return [self.element(p) for p in self.coset_positions(coset_index, localization)]

    def fold(self, localization):
        """2^l로 접힌 도메인 D' = {x^{2^l} : x ∈ D}."""
        factor = 1 << localization
        return Radix2CosetDomain(self.size // factor, self.offset ** factor)

    def evaluate(self, poly):
        """다항식을 도메인 전체에서 평가한다 (코셋 FFT).

        p(g·ωⁱ) = Σⱼ (cⱼ·gʲ)·ω^{ij} 이므로 계수에 gʲ를 곱한 뒤 FFT한다.

        Raises:
            ValueError: 다항식 차수가 도메인 크기 이상일 때
        """
        if len(poly.coeffs) > self.size:
            raise ValueError(
                f"다항식 차수 {poly.degree}가 도메인 크기 {self.size}에 맞지 않습니다"
            )
        scaled = []
        g_power = FR(1)
        for i in range(self.size):
            c = poly.coeffs[i] if i < len(poly.coeffs) else FR(0)
            scaled.append(c * g_power)
            g_power = g_power * self.offset
        return fft(scaled, self.generator)

    def interpolate(self, evals):
        """도메인 위의 평가값에서 다항식을 복원한다 (코셋 IFFT)."""
        if len(evals) != self.size:
            raise ValueError("평가값 개수가 도메인 크기와 다릅니다")
        scaled = ifft(list(evals), self.generator)
        offset_inv = FR(1) / self.offset
        coeffs = []
        g_inv_power = FR(1)
        for c in scaled:
            coeffs.append(c * g_inv_power)
            g_inv_power = g_inv_power * offset_inv
        return Polynomial(coeffs)

    def __eq__(self, other):
        if not isinstance(other, Radix2CosetDomain):
            return False
        return self.size == other.size and self.offset == other.offset

    def __repr__(self):
        return f"Radix2CosetDomain(size={self.size}, offset={int(self.offset)})"
