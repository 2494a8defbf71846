def clamp(x, low, high):
    return max(low, min(high, x))


def clamp01(x):
    return clamp(x, 0.0, 1.0)


def water_adequacy(soil_fraction, optimal_soil_water):
    """1 at the crop's optimal soil water, falling linearly to 0 half a tank away."""
    return clamp01(1.0 - abs(soil_fraction - optimal_soil_water) * 2.0)


def geometric_cost(base, multiplier, steps):
    """round(base * multiplier**steps), the plot price ladder."""
    return int(round(base * multiplier**steps))
