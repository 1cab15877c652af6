"""Client recall and WhatsApp link tests."""
from datetime import date, timedelta
from urllib.parse import parse_qs, urlparse

from core.models import Client
from core.recall import is_due_for_recall, recall_cutoff, recall_list, render_message, whatsapp_link

TODAY = date(2024, 6, 30)


def client(cid, name="Ana Silva", last_visit=None, phone="(11) 99999-8888"):
    return Client(id=cid, name=name, phone=phone, last_visit=last_visit)


def test_cutoff_is_about_a_year():
    assert recall_cutoff(TODAY, 12) == TODAY - timedelta(days=365)
    assert recall_cutoff(TODAY, 6) == TODAY - timedelta(days=182)


def test_due_clients():
    assert is_due_for_recall(client(1, last_visit=None), TODAY, 12)
    assert is_due_for_recall(client(2, last_visit=TODAY - timedelta(days=400)), TODAY, 12)
    assert is_due_for_recall(client(3, last_visit=recall_cutoff(TODAY, 12)), TODAY, 12)
    assert not is_due_for_recall(client(4, last_visit=TODAY - timedelta(days=30)), TODAY, 12)


def test_recall_list_longest_absence_first():
    clients = [
        client(1, last_visit=TODAY - timedelta(days=400)),
        client(2, last_visit=TODAY),
        client(3, last_visit=None),
        client(4, last_visit=TODAY - timedelta(days=800)),
    ]
    assert [c.id for c in recall_list(clients, TODAY, 12)] == [3, 4, 1]


def test_shorter_interval_catches_more_clients():
    clients = [client(1, last_visit=TODAY - timedelta(days=200))]
    assert recall_list(clients, TODAY, 12) == []
    assert len(recall_list(clients, TODAY, 6)) == 1


def test_render_message_placeholders():
    text = render_message("Oi [Nome]! {nome}, a {loja} te espera.", "Ana", "Léo Ótica")
    assert text == "Oi Ana! Ana, a Léo Ótica te espera."


def test_whatsapp_link():
    link = whatsapp_link("(11) 99999-8888", "Ana Silva", "Léo Ótica", "Olá {nome}! Tudo bem?")
    parsed = urlparse(link)
    assert parsed.netloc == "wa.me"
    assert parsed.path == "/5511999998888"
    assert parse_qs(parsed.query)["text"] == ["Olá Ana Silva! Tudo bem?"]
    # encodeURIComponent style: spaces as %20, "!" left alone
    assert "Ol%C3%A1%20Ana%20Silva!%20Tudo%20bem%3F" in link


def test_whatsapp_link_country_code():
    link = whatsapp_link("999", "Ana", "Loja", "x", country_code="351")
    assert link.startswith("https://wa.me/351999?text=")
