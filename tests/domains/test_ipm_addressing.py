# tests/domains/test_ipm_addressing.py

"""
IPv4 주소 할당 모델(순수 함수)에 대한 단위 테스트 모듈입니다.
"""

from types import SimpleNamespace

import pytest

from app.core.exceptions import InvalidAddress, InvalidRange, RangeTooLarge
from app.domains.ipm import addressing
from app.domains.ipm.addressing import IpStatus


def _range(id_, start, end):
    return SimpleNamespace(id=id_, start_ip=start, end_ip=end)


def _detail(id_, range_id, ip, department="", user="", usage="", status=IpStatus.IN_USE):
    return SimpleNamespace(
        id=id_, range_id=range_id, ip_address=ip,
        department=department, user=user, usage=usage, status=status,
    )


# =============================================================================
# 1. 주소 변환
# =============================================================================
@pytest.mark.parametrize("ip, value", [
    ("0.0.0.0", 0),
    ("192.168.0.1", 3232235521),
    ("10.0.0.255", 167772415),
    ("255.255.255.255", 0xFFFFFFFF),
])
def test_ip_to_int_known_values(ip, value):
    """(성공) 잘 알려진 주소의 정수 값."""
    assert addressing.ip_to_int(ip) == value
    assert addressing.int_to_ip(value) == ip


def test_int_to_ip_round_trip_samples():
    """(성공) 경계와 임의 값에서 int -> ip -> int가 원래 값으로 돌아옵니다."""
    for value in (0, 1, 255, 256, 65535, 65536, 16777216, 2**31, 0xFFFFFFFE, 0xFFFFFFFF):
        assert addressing.ip_to_int(addressing.int_to_ip(value)) == value


@pytest.mark.parametrize("bad", [
    "", "1.2.3", "1.2.3.4.5", "256.0.0.1", "1.2.3.-1", "a.b.c.d", "1..2.3", "1.2.3.4 5", " . . . ",
])
def test_ip_to_int_rejects_malformed(bad):
    """(실패) 4개의 0~255 정수 옥텟이 아니면 InvalidAddress."""
    with pytest.raises(InvalidAddress):
        addressing.ip_to_int(bad)


def test_int_to_ip_rejects_out_of_range():
    """(실패) 32비트 범위를 벗어나면 InvalidAddress."""
    with pytest.raises(InvalidAddress):
        addressing.int_to_ip(2**32)
    with pytest.raises(InvalidAddress):
        addressing.int_to_ip(-1)


def test_normalize_ip_strips_spaces_and_leading_zeros():
    assert addressing.normalize_ip(" 010.001.000.009 ") == "10.1.0.9"


# =============================================================================
# 2. 대역 펼치기
# =============================================================================
def test_enumerate_single_address_range():
    """(성공) 시작과 끝이 같으면 주소 하나."""
    assert addressing.enumerate_range("10.0.0.5", "10.0.0.5") == ["10.0.0.5"]


def test_enumerate_crosses_octet_boundary():
    """(성공) 옥텟 경계를 넘는 세 주소를 오름차순으로 반환합니다."""
    assert addressing.enumerate_range("10.0.0.255", "10.0.1.1") == ["10.0.0.255", "10.0.1.0", "10.0.1.1"]


def test_enumerate_reversed_range():
    """(실패) 시작이 끝보다 크면 InvalidRange."""
    with pytest.raises(InvalidRange):
        addressing.enumerate_range("10.0.0.2", "10.0.0.1")


def test_enumerate_too_large_range():
    """(실패) 최대 크기를 넘으면 RangeTooLarge (InvalidRange의 하위 유형)."""
    with pytest.raises(RangeTooLarge):
        addressing.enumerate_range("10.0.0.0", "10.0.1.0", max_size=256)
    assert len(addressing.enumerate_range("10.0.0.0", "10.0.0.255", max_size=256)) == 256


# =============================================================================
# 3. 상태 파생과 화면 행
# =============================================================================
@pytest.mark.parametrize("department, user, usage, expected", [
    ("", "", "", IpStatus.AVAILABLE),
    (None, None, None, IpStatus.AVAILABLE),
    ("  ", "", "", IpStatus.AVAILABLE),
    ("총무팀", "", "", IpStatus.IN_USE),
    ("", "홍길동", "", IpStatus.IN_USE),
    ("", "", "프린터", IpStatus.IN_USE),
])
def test_derive_status(department, user, usage, expected):
    assert addressing.derive_status(department, user, usage) == expected


def test_resolve_display_rows_defaults_and_overlay():
    """(성공) 상세 정보가 있는 주소만 덮어쓰고 나머지는 빈 값과 사용가능."""
    ip_range = _range(1, "192.168.0.1", "192.168.0.3")
    details = [
        _detail(7, 1, "192.168.0.2", department="총무팀", user="홍길동", usage="PC"),
        _detail(8, 2, "192.168.0.3", user="다른 대역"),  # 다른 대역의 같은 주소는 무시
    ]

    rows = addressing.resolve_display_rows(ip_range, details)

    assert [r.ip_address for r in rows] == ["192.168.0.1", "192.168.0.2", "192.168.0.3"]
    assert rows[0].status == IpStatus.AVAILABLE and rows[0].detail_id is None and rows[0].user == ""
    assert rows[1].status == IpStatus.IN_USE
    assert (rows[1].department, rows[1].user, rows[1].usage, rows[1].detail_id) == ("총무팀", "홍길동", "PC", 7)
    assert rows[2].status == IpStatus.AVAILABLE and rows[2].detail_id is None


# =============================================================================
# 4. 일괄 등록 계획
# =============================================================================
def test_plan_bulk_assignment_uses_first_containing_range():
    """(성공) 겹치는 대역이 있으면 먼저 나온 대역에 배정합니다."""
    ranges = [_range(1, "10.0.0.0", "10.0.0.127"), _range(2, "10.0.0.0", "10.0.0.255")]
    rows = [
        {"ip_address": "10.0.0.10", "department": "개발팀", "user": "김", "usage": "서버"},
        {"ip_address": "10.0.0.200", "department": "", "user": "", "usage": ""},
    ]

    assignments, skipped = addressing.plan_bulk_assignment(rows, ranges)

    assert skipped == 0
    assert [(a.range_id, a.ip_address) for a in assignments] == [(1, "10.0.0.10"), (2, "10.0.0.200")]
    assert assignments[0].department == "개발팀"


def test_plan_bulk_assignment_skips_unmatched_and_malformed():
    """(성공) 어느 대역에도 없거나 형식이 잘못된 행은 건너뛰고, 주소가 빈 행은 세지 않습니다."""
    ranges = [_range(1, "10.0.0.0", "10.0.0.255")]
    rows = [
        {"ip_address": "172.16.0.1"},
        {"ip_address": "10.0.0.999"},
        {"ip_address": ""},
        {"ip_address": " 10.0.0.1 ", "user": " 이 "},
    ]

    assignments, skipped = addressing.plan_bulk_assignment(rows, ranges)

    assert skipped == 2
    assert len(assignments) == 1
    assert assignments[0].ip_address == "10.0.0.1"
    assert assignments[0].user == "이"
