def adjust(current_hp, max_hp, delta):
    """Apply a heal (positive) or damage (negative) delta, clamped to [0, max_hp]"""
    return max(0, min(current_hp + delta, max(max_hp, 0)))


def parse_hp(text):
    """Parse an HP input field; anything that is not a whole number counts as 0"""
    try:
        return int(str(text).strip())
    except ValueError:
        return 0


def clamp_current(value, max_hp):
    return adjust(value, max_hp, 0)


def health_fraction(current_hp, max_hp):
    if max_hp <= 0:
        return 0.0
    return max(0.0, min(1.0, current_hp / max_hp))


def health_level(current_hp, max_hp):
    """Colour band for an HP readout: above 75% is high, above 30% medium"""
    percentage = health_fraction(current_hp, max_hp) * 100
    if percentage > 75:
        return 'high'
    if percentage > 30:
        return 'medium'
    return 'low'
