"""Integration tests for routes."""


def test_home_page(client):
    """Home page is accessible without certificate."""
    response = client.get("/")
    assert response.is_success
    assert "Dungeon" in response.body
    assert "75 points" in response.body


def test_play_requires_cert(client):
    """Play page requires a client certificate."""
    response = client.get("/play")
    assert response.is_certificate_required


def test_play_with_cert(auth_client):
    """Play page starts the game west of the house."""
    response = auth_client.get("/play")
    assert response.is_success
    assert "West of House" in response.body
    assert "=> /go/north Go north" in response.body


def test_go_direction(auth_client):
    """Going a direction via /go/ route moves the player."""
    response = auth_client.get("/go/north")
    assert response.is_success
    assert "North of House" in response.body
    assert "Moves: 1" in response.body


def test_go_invalid_direction(auth_client):
    """Unknown directions redirect back to the play page."""
    response = auth_client.get("/go/sideways")
    assert not response.is_success


def test_progress_is_saved(auth_client):
    """A second request sees the move made by the first."""
    auth_client.get("/go/north")
    response = auth_client.get("/play")
    assert "North of House" in response.body


def test_cmd_input_prompt(auth_client):
    """The /cmd route prompts for input when no query."""
    response = auth_client.get("/cmd")
    assert response.is_input_required


def test_cmd_with_input(auth_client):
    """The /cmd route processes commands."""
    response = auth_client.get_input("/cmd", "open mailbox")
    assert response.is_success
    assert "reveals a leaflet" in response.body


def test_inventory_route(auth_client):
    """The /inventory route shows inventory without taking a turn."""
    response = auth_client.get("/inventory")
    assert response.is_success
    assert "empty-handed" in response.body
    assert "Moves: 0" in response.body


def test_score_route(auth_client):
    """The /score route shows score."""
    response = auth_client.get("/score")
    assert response.is_success
    assert "Your score is 0" in response.body


def test_help_page(client):
    """Help page lists the verbs."""
    response = client.get("/help")
    assert response.is_success
    assert "* take" in response.body


def test_about_page(client):
    """About page is accessible."""
    response = client.get("/about")
    assert response.is_success
    assert "Great Underground Empire" in response.body


def test_new_game_prompt(auth_client):
    """The /new route prompts for confirmation."""
    response = auth_client.get("/new")
    assert response.is_input_required


def test_new_game_resets(auth_client):
    auth_client.get("/go/north")
    response = auth_client.get_input("/new", "yes")
    assert response.is_success
    assert "West of House" in response.body
    assert "Moves: 0" in response.body


def test_look_route(auth_client):
    """The /look route works."""
    response = auth_client.get("/look")
    assert response.is_success
    assert "small mailbox" in response.body


def test_finished_game_keeps_its_score(auth_client):
    """After QUIT the play and score pages still show the final tally."""
    auth_client.get_input("/cmd", "open mailbox")
    auth_client.get_input("/cmd", "take leaflet")
    auth_client.get_input("/cmd", "quit")

    response = auth_client.get("/play")
    assert "The game is over." in response.body
    assert "Moves: 2" in response.body

    response = auth_client.get("/score")
    assert response.is_success
    assert "Your score is 0 (total of 75 points), in 2 moves." in response.body
    assert "Moves: 2" in response.body

    response = auth_client.get_input("/new", "yes")
    assert "Moves: 0" in response.body
    assert "The game is over." not in response.body
