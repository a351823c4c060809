import queue
import sys
import threading

import pygame

from hp_tracker.config import LOCAL_STORE_DIR, POLL_INTERVAL, SERVER_URL, SESSION_FILE, STORE_BACKEND
from hp_tracker.services.controller import VIEW_DM, VIEW_LOGIN, VIEW_PLAYER, TrackerController
from hp_tracker.services.health import health_fraction, health_level
from hp_tracker.storage.local_store import LocalStore
from hp_tracker.storage.remote_store import RemoteStore

# Screen dimensions
SCREEN_WIDTH, SCREEN_HEIGHT = 800, 600

# Colors
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
GRAY = (200, 200, 200)
LIGHT_GRAY = (235, 235, 235)
DARK_GRAY = (110, 110, 110)
PURPLE = (107, 33, 168)
RED = (220, 38, 38)
YELLOW = (202, 138, 4)
GREEN = (22, 163, 74)

HEALTH_COLORS = {'high': GREEN, 'medium': YELLOW, 'low': RED}

# Layout
FIELD_WIDTH = 300
FIELD_HEIGHT = 40
ROW_HEIGHT = 50
TABLE_TOP = 140

# Player sheet quick buttons, left to right
QUICK_ADJUSTMENTS = (-5, -1, 1, 5)

# DM roster heal/damage step
DM_ADJUSTMENT = 5

font = None
small_font = None
title_font = None

# Login form and text field state
form = {'room_code': '', 'username': '', 'is_dm': False}
focused_field = None
field_text = {}

# Store writes go through one worker so a slow server never stalls the window
store_writes = queue.Queue()


def store_writer():
    while True:
        fn, args = store_writes.get()
        try:
            fn(*args)
        except Exception as e:
            print(f"Error writing to the store: {e}")
        finally:
            store_writes.task_done()


def run_in_background(fn, *args):
    store_writes.put((fn, args))


def create_store():
    """Build the store selected by STORE_BACKEND"""
    if STORE_BACKEND == 'local':
        print(f"Using local store in {LOCAL_STORE_DIR} (polling every {POLL_INTERVAL}s)")
        return LocalStore(LOCAL_STORE_DIR)

    store = RemoteStore(SERVER_URL)
    if not store.connect():
        print(f"Database server unavailable at {SERVER_URL}; restart the client once it is running")
    return store


def centered_rect(y, width=FIELD_WIDTH, height=FIELD_HEIGHT):
    return pygame.Rect(SCREEN_WIDTH // 2 - width // 2, y, width, height)


def login_rects():
    return {
        'room_code': centered_rect(150),
        'username': centered_rect(230),
        'is_dm': pygame.Rect(SCREEN_WIDTH // 2 - 150, 295, 24, 24),
        'enter': centered_rect(350),
    }


def change_room_rect():
    return pygame.Rect(SCREEN_WIDTH - 170, 20, 140, 34)


def roster_rects(index):
    """Minus and plus buttons for one roster row"""
    y = TABLE_TOP + 40 + index * ROW_HEIGHT
    return pygame.Rect(620, y + 8, 32, 32), pygame.Rect(670, y + 8, 32, 32)


def player_rects():
    rects = {
        'character_name': pygame.Rect(60, 150, 680, FIELD_HEIGHT),
        'max_hp': pygame.Rect(60, 240, 320, FIELD_HEIGHT),
        'current_hp': pygame.Rect(420, 240, 320, FIELD_HEIGHT),
    }
    for i, delta in enumerate(QUICK_ADJUSTMENTS):
        x = 80 + i * 60 if delta < 0 else SCREEN_WIDTH - 200 + (i - 2) * 60
        rects[delta] = pygame.Rect(x, 370, 44, 44)
    return rects


def draw_text(screen, text, pos, color=BLACK, use_font=None):
    surface = (use_font or font).render(text, True, color)
    screen.blit(surface, pos)
    return surface


def draw_button(screen, rect, label, color=GRAY, text_color=BLACK):
    pygame.draw.rect(screen, color, rect, border_radius=6)
    text = small_font.render(label, True, text_color)
    screen.blit(text, (rect.centerx - text.get_width() // 2, rect.centery - text.get_height() // 2))


def draw_field(screen, rect, label, value, name):
    draw_text(screen, label, (rect.x, rect.y - 28), DARK_GRAY, small_font)
    border = PURPLE if focused_field == name else GRAY
    pygame.draw.rect(screen, WHITE, rect)
    pygame.draw.rect(screen, border, rect, 2)
    draw_text(screen, field_text.get(name, value) if focused_field == name else value, (rect.x + 8, rect.y + 7))


def draw_health_bar(screen, rect, current_hp, max_hp):
    pygame.draw.rect(screen, GRAY, rect, border_radius=rect.height // 2)
    fraction = health_fraction(current_hp, max_hp)
    if fraction <= 0:
        return
    # Bar colour bands are coarser than the text ones: above half, above a quarter
    color = GREEN if fraction > 0.5 else YELLOW if fraction > 0.25 else RED
    filled = pygame.Rect(rect.x, rect.y, max(rect.height, int(rect.width * fraction)), rect.height)
    pygame.draw.rect(screen, color, filled, border_radius=rect.height // 2)


def draw_login(screen):
    title = title_font.render("D&D Health Tracker", True, PURPLE)
    screen.blit(title, (SCREEN_WIDTH // 2 - title.get_width() // 2, 50))

    rects = login_rects()
    draw_field(screen, rects['room_code'], "Room Code", form['room_code'], 'room_code')
    draw_field(screen, rects['username'], "Username", form['username'], 'username')

    pygame.draw.rect(screen, WHITE, rects['is_dm'])
    pygame.draw.rect(screen, DARK_GRAY, rects['is_dm'], 2)
    if form['is_dm']:
        pygame.draw.rect(screen, PURPLE, rects['is_dm'].inflate(-8, -8))
    draw_text(screen, "I am the DM", (rects['is_dm'].right + 10, rects['is_dm'].y - 2))

    draw_button(screen, rects['enter'], "Enter Game", PURPLE, WHITE)


def draw_dm(screen, controller):
    characters = controller.characters
    draw_text(screen, f"DM View - Room: {controller.room_code}", (30, 20), use_font=title_font)
    draw_text(screen, f"Players: {len(characters)}", (30, 70), DARK_GRAY)
    draw_button(screen, change_room_rect(), "Change Room")

    if not characters:
        message = "No players have joined this room yet."
        hint = f"Share the room code '{controller.room_code}' with your players!"
        for i, line in enumerate((message, hint)):
            text = font.render(line, True, DARK_GRAY)
            screen.blit(text, (SCREEN_WIDTH // 2 - text.get_width() // 2, 220 + i * 40))
        return

    pygame.draw.rect(screen, LIGHT_GRAY, (20, TABLE_TOP, SCREEN_WIDTH - 40, 36))
    for label, x in (("Character", 30), ("Player", 220), ("Health", 400), ("Actions", 620)):
        draw_text(screen, label, (x, TABLE_TOP + 6), use_font=small_font)

    for index, character in enumerate(characters):
        y = TABLE_TOP + 40 + index * ROW_HEIGHT
        pygame.draw.line(screen, GRAY, (20, y), (SCREEN_WIDTH - 20, y))
        draw_text(screen, character.character_name, (30, y + 12))
        draw_text(screen, character.player_name, (220, y + 12), DARK_GRAY)

        color = HEALTH_COLORS[health_level(character.current_hp, character.max_hp)]
        draw_text(screen, f"{character.current_hp} / {character.max_hp}", (400, y + 4), color, small_font)
        draw_health_bar(screen, pygame.Rect(400, y + 30, 180, 8), character.current_hp, character.max_hp)

        minus, plus = roster_rects(index)
        draw_button(screen, minus, f"-{DM_ADJUSTMENT}", (254, 226, 226), RED)
        draw_button(screen, plus, f"+{DM_ADJUSTMENT}", (220, 252, 231), GREEN)


def draw_player(screen, controller):
    draw_text(screen, f"Player View - Room: {controller.room_code}", (30, 20), use_font=title_font)
    draw_text(screen, f"Player: {controller.username}", (30, 70), DARK_GRAY)
    draw_button(screen, change_room_rect(), "Change Room")

    rects = player_rects()
    draw_field(screen, rects['character_name'], "Character Name", controller.character_name, 'character_name')
    draw_field(screen, rects['max_hp'], "Max HP", str(controller.max_hp), 'max_hp')
    draw_field(screen, rects['current_hp'], "Current HP", str(controller.current_hp), 'current_hp')

    pygame.draw.rect(screen, LIGHT_GRAY, (40, 310, SCREEN_WIDTH - 80, 150), border_radius=8)
    draw_text(screen, "Health Adjustment", (60, 320), use_font=small_font)
    for delta in QUICK_ADJUSTMENTS:
        label = f"+{delta}" if delta > 0 else str(delta)
        draw_button(screen, rects[delta], label, RED if delta < 0 else GREEN, WHITE)

    color = HEALTH_COLORS[health_level(controller.current_hp, controller.max_hp)]
    readout = title_font.render(f"{controller.current_hp} / {controller.max_hp}", True, color)
    screen.blit(readout, (SCREEN_WIDTH // 2 - readout.get_width() // 2, 365))
    draw_health_bar(screen, pygame.Rect(SCREEN_WIDTH // 2 - 60, 410, 120, 12),
                     controller.current_hp, controller.max_hp)


def focus(name, controller):
    """Move keyboard focus; leaving a player sheet field saves the record"""
    global focused_field
    if focused_field == name:
        return
    previous = focused_field
    focused_field = name
    if previous in ('character_name', 'max_hp', 'current_hp'):
        run_in_background(controller.save_player)
    if name == 'max_hp':
        field_text[name] = str(controller.max_hp)
    elif name == 'current_hp':
        field_text[name] = str(controller.current_hp)


def handle_text_input(event, controller):
    if focused_field is None:
        return

    if event.key in (pygame.K_RETURN, pygame.K_TAB):
        focus(None, controller)
        return

    if focused_field in form:
        value = form[focused_field]
        form[focused_field] = value[:-1] if event.key == pygame.K_BACKSPACE else value + event.unicode
    elif focused_field == 'character_name':
        value = controller.character_name
        controller.set_character_name(value[:-1] if event.key == pygame.K_BACKSPACE else value + event.unicode)
    else:
        text = field_text.get(focused_field, '')
        if event.key == pygame.K_BACKSPACE:
            text = text[:-1]
        elif event.unicode.isdigit():
            text += event.unicode
        field_text[focused_field] = text
        if focused_field == 'max_hp':
            controller.set_max_hp(text)
        else:
            controller.set_current_hp(text)


def handle_click(pos, controller):
    if controller.view == VIEW_LOGIN:
        rects = login_rects()
        focus(next((name for name in ('room_code', 'username') if rects[name].collidepoint(pos)), None), controller)
        if rects['is_dm'].collidepoint(pos):
            form['is_dm'] = not form['is_dm']
        elif rects['enter'].collidepoint(pos):
            if controller.login(form['room_code'], form['username'], form['is_dm']):
                form['room_code'], form['username'] = '', ''
        return

    if change_room_rect().collidepoint(pos):
        focus(None, controller)
        # The sheet's last save has to land before the view changes
        store_writes.join()
        controller.logout()
        form['is_dm'] = False
        return

    if controller.view == VIEW_DM:
        for index, character in enumerate(controller.characters):
            minus, plus = roster_rects(index)
            if minus.collidepoint(pos):
                run_in_background(controller.adjust_health, character.player_name, -DM_ADJUSTMENT)
            elif plus.collidepoint(pos):
                run_in_background(controller.adjust_health, character.player_name, DM_ADJUSTMENT)
        return

    rects = player_rects()
    focus(next((name for name in ('character_name', 'max_hp', 'current_hp') if rects[name].collidepoint(pos)), None),
          controller)
    for delta in QUICK_ADJUSTMENTS:
        if rects[delta].collidepoint(pos):
            run_in_background(controller.adjust_own_health, delta)


def main():
    global font, small_font, title_font

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
    pygame.display.set_caption("D&D Health Tracker")
    font = pygame.font.SysFont('Arial', 24)
    small_font = pygame.font.SysFont('Arial', 18)
    title_font = pygame.font.SysFont('Arial', 32, True)

    threading.Thread(target=store_writer, daemon=True).start()
    store = create_store()
    controller = TrackerController(store, SESSION_FILE, POLL_INTERVAL)
    controller.restore()

    clock = pygame.time.Clock()
    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                handle_click(event.pos, controller)
            elif event.type == pygame.KEYDOWN:
                handle_text_input(event, controller)

        screen.fill(WHITE)
        if controller.view == VIEW_DM:
            draw_dm(screen, controller)
        elif controller.view == VIEW_PLAYER:
            draw_player(screen, controller)
        else:
            draw_login(screen)

        pygame.display.flip()
        clock.tick(30)

    # Clean up
    focus(None, controller)
    store_writes.join()
    controller.close()
    if isinstance(store, RemoteStore):
        store.disconnect()
    pygame.quit()
    sys.exit()


if __name__ == '__main__':
    main()
