class Room:
  """Index of the player names recorded under one room code"""
  __code: str
  __players: list[str]

  def __init__(self, code: str, players=None):
    self.__code = code
    self.__players = []
    for player_name in players or []:
      self.add_player(player_name)

  def get_code(self):
    return self.__code

  def get_players(self):
    return list(self.__players)

  def add_player(self, player_name: str):
    """Add a player name, returning False when it was already indexed"""
    if player_name in self.__players:
      return False
    self.__players.append(player_name)
    return True

  def remove_player(self, player_name: str):
    if player_name not in self.__players:
      return
    self.__players.remove(player_name)
