from argonkit.links import find_rel_next_link


def test_single_link():
    val = ' <https://api.github.com/resource?page=2>; rel="next" '
    assert find_rel_next_link(val) == "https://api.github.com/resource?page=2"


def test_link_with_query():
    val = ' <https://gitlab.com/api/v4/projects/13083/releases?id=13083&page=2&per_page=20>; rel="next" '
    assert (
        find_rel_next_link(val)
        == "https://gitlab.com/api/v4/projects/13083/releases?id=13083&page=2&per_page=20"
    )


def test_returns_first_of_many():
    val = ' <https://place.com>; rel="next", <https://wow.com>; rel="next" '
    assert find_rel_next_link(val) == "https://place.com"


def test_skips_bad_format():
    val = ' https://bad-format.com; rel="next", <https://wow.com>; rel="next" '
    assert find_rel_next_link(val) == "https://wow.com"


def test_all_bad_format():
    val = (
        ' https://bad-format.com; rel="next", <https://also-bad.com; rel="next" ,'
        ' <https://good.com>; rel="preconnect" '
    )
    assert find_rel_next_link(val) is None