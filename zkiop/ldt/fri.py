"""
FRI (Fast Reed-Solomon IOP of Proximity)
=========================================

코드워드를 반복해서 접어(fold) 차수를 줄이는 저차 테스트의 핵심 연산.

**접기 (folding)**:
  도메인 D(크기 N)를 국소화 l로 나누면 M = N / 2^l 개의 코셋이 생긴다.
  코셋 c = {x·ζʲ} 위의 값 f(x·ζʲ)를 라그랑주 보간한 다항식을
  챌린지 α에서 평가하면, 접힌 도메인 D' = D^{2^l}의 위치 c 값이 된다.

    f(X) = Σₖ Xᵏ · fₖ(X^{2^l})      (0 ≤ k < 2^l)
    fold(f)(y) = Σₖ αᵏ · fₖ(y)       deg ≤ deg(f) / 2^l

**레이어 구성** (localization_parameters = [l₀, l₁, ..., l_{r-1}]):
  레이어 0       : 원래 코드워드 (도메인 D₀, 국소화 l₀)
  레이어 i (i≥1) : 커밋된 접힌 코드워드 (도메인 Dᵢ, 국소화 lᵢ)
  마지막 접기 결과는 커밋하지 않고 다항식 계수를 짧은 메시지로 보낸다.
    계수 개수 = (tested_degree >> Σlᵢ) + 1

사용 예시:
    >>> params = FRIParameters(64, [1, 2, 1], Radix2CosetDomain(128, FR(1)))
    >>> params.final_poly_num_coeffs     # 5
    >>> folded = fold_layer(codeword, params.domain, 1, alpha)
"""

from zkiop.domain import Radix2CosetDomain
from zkiop.polynomial import interpolate_at


class FRIParameters:
    """FRI 파라미터.

    속성:
        tested_degree: 검사할 차수 상한 D (포함)
        localization_parameters: 접기 단계마다의 국소화 l
        domain: 레이어 0의 코드워드 도메인

    Raises:
        ValueError: 파라미터 형태가 맞지 않을 때
    """

    def __init__(self, tested_degree, localization_parameters, domain):
        if not isinstance(domain, Radix2CosetDomain):
            raise ValueError("FRI 도메인은 Radix2CosetDomain이어야 합니다")
        localization_parameters = list(localization_parameters)
        if not localization_parameters:
            raise ValueError("국소화 파라미터가 하나 이상 필요합니다")
        if any(l < 1 for l in localization_parameters):
            raise ValueError(f"국소화 파라미터는 1 이상이어야 합니다: {localization_parameters}")
        if sum(localization_parameters) > domain.log_size:
            raise ValueError(
                f"국소화 합 {sum(localization_parameters)}가 도메인 크기 {domain.size}를 초과합니다"
            )
        if tested_degree < 0 or tested_degree >= domain.size:
            raise ValueError(
                f"검사 차수 {tested_degree}는 0 이상, 도메인 크기 {domain.size} 미만이어야 합니다"
            )
        self.tested_degree = tested_degree
        self.localization_parameters = localization_parameters
        self.domain = domain

    @property
    def num_rounds(self):
        return len(self.localization_parameters)

    def layer_domains(self):
        """레이어마다의 도메인 [D₀, D₁, ..., D_r] (마지막은 최종 다항식 도메인)."""
        domains = [self.domain]
        for l in self.localization_parameters:
            domains.append(domains[-1].fold(l))
        return domains

    @property
    def final_domain(self):
        return self.layer_domains()[-1]

    @property
    def final_poly_num_coeffs(self):
        return (self.tested_degree >> sum(self.localization_parameters)) + 1

    def __repr__(self):
        return (
            f"FRIParameters(tested_degree={self.tested_degree}, "
            f"localization={self.localization_parameters}, domain={self.domain!r})"
        )


def fold_coset(domain, localization, coset_index, values, alpha):
    """코셋 하나를 α로 접는다.

    Args:
        domain: 현재 레이어 도메인
        localization: 현재 레이어 국소화 l
        coset_index: 코셋 c
        values: 코셋 위치 [c, c+M, ...] 의 값 2^l 개
        alpha: 접기 챌린지

    Returns:
        FR: 접힌 도메인의 위치 c 값
    """
    xs = domain.coset_elements(coset_index, localization)
    return interpolate_at(xs, values, alpha)


def fold_layer(values, domain, localization, alpha):
    """레이어 전체를 α로 접는다 (prover 측)."""
    if len(values) != domain.size:
        raise ValueError("코드워드 길이가 도메인 크기와 다릅니다")
    m = domain.num_cosets(localization)
    folded = []
    for c in range(m):
        coset = [values[p] for p in domain.coset_positions(c, localization)]
        folded.append(fold_coset(domain, localization, c, coset, alpha))
    return folded
