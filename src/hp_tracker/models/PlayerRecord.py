class PlayerRecord:
  player_name: str
  character_name: str
  max_hp: int
  current_hp: int

  def __init__(self, player_name: str, character_name: str = '', max_hp: int = 0, current_hp: int = 0):
    self.player_name = player_name
    self.character_name = character_name
    self.max_hp = max_hp
    self.current_hp = current_hp

  @classmethod
  def default(cls, player_name: str):
    """Record written the first time a player enters a room"""
    return cls(player_name)

  @classmethod
  def from_dict(cls, player_name: str, data):
    """Build a record from its stored form, raising ValueError when it is malformed"""
    if not isinstance(data, dict):
      raise ValueError(f"expected an object, got {type(data).__name__}")

    for key in ('name', 'maxHP', 'currentHP'):
      if key not in data:
        raise ValueError(f"missing field '{key}'")

    name = data['name']
    if not isinstance(name, str):
      raise ValueError("'name' must be a string")

    max_hp = data['maxHP']
    current_hp = data['currentHP']
    for key, value in (('maxHP', max_hp), ('currentHP', current_hp)):
      if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{key}' must be an integer")

    return cls(player_name, name, max_hp, current_hp)

  def to_dict(self):
    return {
      'name': self.character_name,
      'maxHP': self.max_hp,
      'currentHP': self.current_hp,
    }

  def __eq__(self, other):
    if not isinstance(other, PlayerRecord):
      return NotImplemented
    return (self.player_name, self.character_name, self.max_hp, self.current_hp) == \
      (other.player_name, other.character_name, other.max_hp, other.current_hp)

  def __repr__(self):
    return (f"PlayerRecord({self.player_name!r}, {self.character_name!r}, "
            f"max_hp={self.max_hp}, current_hp={self.current_hp})")
