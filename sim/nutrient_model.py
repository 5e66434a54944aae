# sim/nutrient_model.py
"""
Root nutrient uptake and the nutrient-driven growth multipliers.

Two policies, chosen per tick by the `npk_nutrients` toggle:
- NPK: nitrogen, phosphorus and potassium are drawn independently from the
  biome's per-nutrient soil fractions, scaled by the species' need.
- Pooled: a single nutrient flow from overall soil richness, split 50/30/20.

Phosphorus uptake is boosted by the mycorrhizal bonus under both policies.
"""

from typing import Tuple

from sim.state import ROOT_TYPES, GameState, clamp

NPK_SPLIT = (0.5, 0.3, 0.2)   # N, P, K


def nutrient_uptake(state: GameState, npk_enabled: bool) -> Tuple[float, float, float]:
    """Return this tick's (n_in, p_in, k_in)."""
    plant, seed, biome = state.plant, state.seed, state.biome
    rt = ROOT_TYPES[state.root_type]
    roots = plant.total_roots / 100
    myco = state.mycorrhizal_bonus
    base = roots * rt.nutrient_bonus * seed.root_efficiency

    if npk_enabled:
        npk, need = biome.npk, seed.npk_need
        n_in = base * npk.n * 1.5 * need.n
        p_in = base * npk.p * 1.2 * need.p * (1 + myco * 0.8)
        k_in = base * npk.k * 1.0 * need.k
    else:
        pooled = base * biome.soil_nutrients * 1.5
        n_in = pooled * NPK_SPLIT[0]
        p_in = pooled * NPK_SPLIT[1] * (1 + myco * 0.8)
        k_in = pooled * NPK_SPLIT[2]
    return n_in, p_in, k_in


def growth_factors(state: GameState, npk_enabled: bool) -> Tuple[float, float, float]:
    """
    (n_factor, p_factor, k_factor) growth multipliers.

    N drives leaves and branches, P drives roots and trunk, K is a broad
    efficiency multiplier on roots and branches.
    """
    if not npk_enabled:
        return 1.0, 1.0, 1.0
    return (
        clamp(state.nitrogen / 30, 0.1, 1.5),
        clamp(state.phosphorus / 30, 0.1, 1.5),
        clamp(state.potassium / 30, 0.5, 1.2),
    )
