class Session:
  room_code: str
  username: str
  is_dm: bool

  def __init__(self, room_code: str, username: str, is_dm: bool = False):
    self.room_code = room_code
    self.username = username
    self.is_dm = is_dm

  @property
  def role(self):
    """Screen this identity lands on: 'dm' or 'player'"""
    return 'dm' if self.is_dm else 'player'

  def __eq__(self, other):
    if not isinstance(other, Session):
      return NotImplemented
    return (self.room_code, self.username, self.is_dm) == (other.room_code, other.username, other.is_dm)

  def __repr__(self):
    return f"Session({self.room_code!r}, {self.username!r}, is_dm={self.is_dm})"
