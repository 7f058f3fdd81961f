import json

import pytest
from metalens.errors import InvalidUrlError
from metalens.models import PageMetadata
from metalens.storage import (
    load_metadata,
    parse_file_name,
    parse_url_for_filename,
    save_metadata,
)


SAMPLE = PageMetadata(
    title="Café & Crème",
    meta={"description": "Menu", "canonical": "https://example.com/menu"},
    open_graph={"og:title": "Café", "og:image:width": "1200"},
    twitter={"twitter:card": "summary"},
)


# --- save / load ---

def test_save_writes_pretty_json(tmp_path):
    path = save_metadata(SAMPLE, tmp_path / "menu.json")
    text = path.read_text(encoding="utf-8")
    assert text.startswith('{\n  "title": "Café & Crème"')
    assert json.loads(text)["openGraph"]["og:image:width"] == "1200"


def test_round_trip_reproduces_record(tmp_path):
    path = save_metadata(SAMPLE, tmp_path / "menu.json")
    assert load_metadata(path) == SAMPLE


def test_round_trip_with_empty_maps(tmp_path):
    bare = PageMetadata(title="No title found")
    assert load_metadata(save_metadata(bare, tmp_path / "bare.json")) == bare


# --- filenames from URLs ---

@pytest.mark.parametrize("url,filename", [
    ("https://example.com/path/to/resource", "example.com_path_to_resource.json"),
    ("http://localhost:3000/test?query=1", "localhost_test_query_1.json"),
    ("example.com", "example.com_root.json"),
    ("https://example.com/", "example.com_root.json"),
    ("https://example.com/search?category=books&author=tolkien",
     "example.com_search_category_books_author_tolkien.json"),
    ("https://example.com#section1", "example.com_section1.json"),
    ("https://example.com/a!b@c#d$e%f^g&h*i(j)k_l+m=n`o~p;q:r,s.t",
     "example.com_a_b_c_d_e_f_g_h_i_j_k_l_m_n_o_p_q_r_s_t.json"),
])
def test_parse_url_for_filename(url, filename):
    assert parse_url_for_filename(url).filename == filename


def test_parse_url_for_filename_parts():
    parsed = parse_url_for_filename("https://example.com/docs/")
    assert parsed.hostname == "example.com"
    assert parsed.path == "/docs"


def test_parse_url_for_filename_keeps_query_and_fragment_after_path():
    parsed = parse_url_for_filename("https://example.com/docs/page?id=7#intro")
    assert parsed.path == "/docs/page?id=7#intro"
    assert parsed.filename == "example.com_docs_page_id_7_intro.json"


def test_parse_url_for_filename_rejects_bad_port():
    with pytest.raises(InvalidUrlError):
        parse_url_for_filename("http://example.com:-1/path")


def test_parse_url_for_filename_rejects_empty():
    with pytest.raises(InvalidUrlError):
        parse_url_for_filename("")


# --- sanitizing user-supplied names ---

@pytest.mark.parametrize("raw,expected", [
    ("test file*name?.json", "test_file_name_.json"),
    ("another/file\\name", "another_file_name.json"),
    ("noextension", "noextension.json"),
    ("image.png", "image.png.json"),
    ("image.json", "image.json"),
    ("IMAGE.JSON", "IMAGE.JSON"),
    ("image.", "image.json"),
    ("test___name", "test_name.json"),
])
def test_parse_file_name(raw, expected):
    assert parse_file_name(raw) == expected


@pytest.mark.parametrize("raw", ["test file*name?", "a//b", "x.json", "example.com_root.json"])
def test_parse_file_name_idempotent(raw):
    once = parse_file_name(raw)
    assert parse_file_name(once) == once
