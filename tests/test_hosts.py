from core.hosts import group_external_hosts, is_excluded_extension, is_same_origin


def test_excluded_extensions():
    assert is_excluded_extension("https://cdn.example.net/site.CSS")
    assert is_excluded_extension("https://cdn.example.net/logo.png?v=2")
    assert not is_excluded_extension("https://cdn.example.net/app.js")


def test_same_origin_ignores_www():
    assert is_same_origin("https://www.example.com/a.js", "example.com")
    assert not is_same_origin("https://cdn.example.com/a.js", "example.com")


def test_group_external_hosts():
    requests = {
        "https://www.example.com/local.js": ["dom_script"],
        "https://cdn.jsdelivr.net/npm/vue.js": ["dom_script"],
        "https://cdn.jsdelivr.net/npm/vue-router.js": ["dom_script", "network_script"],
        "https://fonts.gstatic.com/font.woff2": ["link_preload"],
        "https://www.youtube.com/embed/xyz": ["iframe"],
        "": ["dom_script"],
    }
    hosts = group_external_hosts("https://example.com/", requests)
    assert hosts == [
        {"hostname": "cdn.jsdelivr.net", "tags": ["dom_script", "network_script"]},
        {"hostname": "www.youtube.com", "tags": ["iframe"]},
    ]


def test_no_external_hosts():
    assert group_external_hosts("https://example.com", {"/relative.js": ["dom_script"]}) == []
