from hp_tracker.models.PlayerRecord import PlayerRecord


def project(players):
    """Turn a room's players subtree into the DM roster.

    ``players`` maps player name -> stored record (or is None for an empty
    room). Players who have not named a character yet are left out, and
    malformed records are reported and skipped. Order follows the mapping.
    """
    if not players:
        return []
    if not isinstance(players, dict):
        print("Received invalid player list")
        return []

    roster = []
    for player_name, data in players.items():
        try:
            record = PlayerRecord.from_dict(player_name, data)
        except ValueError as e:
            print(f"Error parsing player data for {player_name}: {e}")
            continue
        if record.character_name:
            roster.append(record)
    return roster
