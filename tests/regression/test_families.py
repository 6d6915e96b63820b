"""
Family and link function tests.
"""

import numpy as np
import pytest

from pyestimators.core.exceptions import ValidationError
from pyestimators.regression.families import (
    Gaussian, Binomial, Poisson, Tweedie, Gamma,
    IdentityLink, LogitLink, LogLink, ProbitLink,
    resolve_family, resolve_link,
)


class TestLinks:
    """Link function roundtrips and derivatives."""

    @pytest.mark.parametrize("link_cls,mu_range", [
        (IdentityLink, np.linspace(-5, 5, 50)),
        (LogitLink, np.linspace(0.01, 0.99, 50)),
        (LogLink, np.linspace(0.01, 10, 50)),
        (ProbitLink, np.linspace(0.01, 0.99, 50)),
    ])
    def test_roundtrip(self, link_cls, mu_range):
        link = link_cls()
        np.testing.assert_allclose(link.linkinv(link.link(mu_range)), mu_range, rtol=1e-8)

    @pytest.mark.parametrize("link_cls", [IdentityLink, LogitLink, LogLink, ProbitLink])
    def test_mu_eta_matches_finite_difference(self, link_cls):
        link = link_cls()
        eta = np.linspace(-4, 4, 41)
        h = 1e-6
        numeric = (link.linkinv(eta + h) - link.linkinv(eta - h)) / (2 * h)
        np.testing.assert_allclose(link.mu_eta(eta), numeric, rtol=1e-5)

    def test_logit_extreme_eta(self):
        mu = LogitLink().linkinv(np.array([-1000.0, -100.0, 0.0, 100.0, 1000.0]))
        assert np.all(np.isfinite(mu))
        assert np.all((mu >= 0) & (mu <= 1))

    def test_resolve_link(self):
        assert isinstance(resolve_link('PROBIT', IdentityLink()), ProbitLink)
        assert isinstance(resolve_link(None, LogLink()), LogLink)
        with pytest.raises(ValueError, match="Unknown link"):
            resolve_link('cloglog', IdentityLink())


# (family, y, mu) with mu strictly inside the support
_DEVIANCE_CASES = [
    (Gaussian(), np.array([-1.0, 0.5, 2.0]), np.array([0.0, 0.7, 1.5])),
    (Binomial(), np.array([0.0, 1.0, 0.3]), np.array([0.2, 0.6, 0.5])),
    (Poisson(), np.array([0.0, 3.0, 7.0]), np.array([0.5, 2.0, 6.0])),
    (Gamma(), np.array([0.5, 2.0, 4.0]), np.array([1.0, 1.5, 5.0])),
    (Tweedie(power=1.5), np.array([0.0, 2.0, 4.0]), np.array([0.5, 1.5, 5.0])),
    (Tweedie(power=3.0), np.array([0.5, 2.0, 4.0]), np.array([1.0, 1.5, 5.0])),
]


class TestFamilies:
    """Variance, unit deviance and response support."""

    @pytest.mark.parametrize("family,y,mu", _DEVIANCE_CASES)
    def test_unit_deviance_zero_at_saturation(self, family, y, mu):
        y_pos = y if family.name == 'gaussian' else np.maximum(y, 0.1)
        np.testing.assert_allclose(family.unit_deviance(y_pos, y_pos), 0.0, atol=1e-8)

    @pytest.mark.parametrize("family,y,mu", _DEVIANCE_CASES)
    def test_unit_deviance_non_negative(self, family, y, mu):
        assert np.all(family.unit_deviance(y, mu) >= 0)

    @pytest.mark.parametrize("family,y,mu", _DEVIANCE_CASES)
    def test_deviance_derivative_matches_variance(self, family, y, mu):
        """∂d/∂μ = -2 (y - μ) / V(μ), which the GLM gradient relies on."""
        h = 1e-6
        numeric = (family.unit_deviance(y, mu + h) - family.unit_deviance(y, mu - h)) / (2 * h)
        analytic = -2.0 * (y - mu) / family.variance(mu)
        np.testing.assert_allclose(numeric, analytic, rtol=1e-5, atol=1e-7)

    def test_deviance_sums_unit_deviance(self):
        fam = Poisson()
        y = np.array([0.0, 1.0, 4.0])
        mu = np.array([0.5, 1.0, 3.0])
        wt = np.array([1.0, 2.0, 0.5])
        assert fam.deviance(y, mu, wt) == pytest.approx(float(np.sum(wt * fam.unit_deviance(y, mu))))

    def test_gaussian_deviance_is_rss(self):
        y = np.array([1.0, 2.0, 3.0])
        mu = np.array([1.5, 2.0, 2.0])
        assert Gaussian().deviance(y, mu, np.ones(3)) == pytest.approx(1.25)

    def test_binomial_rejects_out_of_range(self):
        with pytest.raises(ValidationError, match=r"\[0, 1\]"):
            Binomial().validate_response(np.array([0.0, 1.0, 2.0]))

    def test_poisson_rejects_negative(self):
        with pytest.raises(ValidationError, match="non-negative"):
            Poisson().validate_response(np.array([1.0, -1.0]))

    def test_gamma_rejects_zero(self):
        with pytest.raises(ValidationError, match="strictly positive"):
            Gamma().validate_response(np.array([1.0, 0.0]))

    def test_gaussian_accepts_anything_finite(self):
        Gaussian().validate_response(np.array([-1e6, 0.0, 1e6]))


class TestTweedie:

    def test_power_zero_defaults_to_identity(self):
        assert isinstance(Tweedie(power=0).link, IdentityLink)

    @pytest.mark.parametrize("power", [1.0, 1.5, 2.0, 3.0])
    def test_positive_power_defaults_to_log(self, power):
        assert isinstance(Tweedie(power=power).link, LogLink)

    @pytest.mark.parametrize("power", [0.5, -1.0])
    def test_invalid_power(self, power):
        with pytest.raises(ValueError, match="power"):
            Tweedie(power=power)

    def test_power_one_matches_poisson(self):
        y = np.array([0.0, 2.0, 5.0])
        mu = np.array([0.5, 2.5, 4.0])
        np.testing.assert_allclose(
            Tweedie(power=1).unit_deviance(y, mu), Poisson().unit_deviance(y, mu),
        )

    def test_gamma_is_power_two(self):
        fam = Gamma()
        assert fam.power == 2.0
        assert fam.name == 'gamma'
        y = np.array([0.5, 2.0])
        mu = np.array([1.0, 1.0])
        np.testing.assert_allclose(fam.unit_deviance(y, mu), Tweedie(2.0).unit_deviance(y, mu))

    def test_general_power_continuous_near_two(self):
        y = np.array([0.5, 2.0, 4.0])
        mu = np.array([1.0, 1.5, 5.0])
        np.testing.assert_allclose(
            Tweedie(power=2.0 + 1e-7).unit_deviance(y, mu),
            Tweedie(power=2.0).unit_deviance(y, mu),
            rtol=1e-5,
        )


class TestResolveFamily:

    def test_none_is_gaussian(self):
        assert isinstance(resolve_family(None), Gaussian)

    @pytest.mark.parametrize("name,cls", [
        ('gaussian', Gaussian), ('Normal', Gaussian), ('binomial', Binomial),
        ('poisson', Poisson), ('gamma', Gamma), ('tweedie', Tweedie),
    ])
    def test_string_names(self, name, cls):
        assert isinstance(resolve_family(name), cls)

    def test_instance_passthrough(self):
        fam = Binomial(link='probit')
        assert resolve_family(fam) is fam
        assert isinstance(fam.link, ProbitLink)

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown family"):
            resolve_family('negative_binomial')

    def test_wrong_type(self):
        with pytest.raises(TypeError):
            resolve_family(3)

    def test_only_gaussian_identity_is_closed_form(self):
        assert Gaussian().is_ordinary_least_squares
        assert not Gaussian(link='log').is_ordinary_least_squares
        assert not Tweedie(power=0).is_ordinary_least_squares
        assert not Poisson().is_ordinary_least_squares
