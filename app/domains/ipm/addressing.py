# app/domains/ipm/addressing.py

"""
IPv4 주소 할당 모델의 순수 함수 모음입니다. (DB, HTTP 의존성 없음)

- 점 표기 주소 <-> 32비트 정수 변환
- 대역(start~end) 펼치기와 크기 제한
- 할당 상태 파생 규칙: 부서/사용자/용도 중 하나라도 있으면 사용중
- 대역 화면 행 구성: 대역의 모든 주소에 상세 정보를 (range_id, ip) 기준으로 덧씌움
- 엑셀 일괄 등록 계획: 각 행의 주소를 포함하는 첫 번째 대역에 배정, 없으면 건너뜀
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from app.core.exceptions import InvalidAddress, InvalidRange, RangeTooLarge

logger = logging.getLogger(__name__)

MAX_IPV4 = 0xFFFFFFFF
_OCTET = re.compile(r"[0-9]{1,3}")


class IpStatus(str, Enum):
    IN_USE = "사용중"
    AVAILABLE = "사용가능"


# =============================================================================
# 1. 주소 변환
# =============================================================================
def ip_to_int(ip: str) -> int:
    """'192.168.0.1' -> 3232235521. 4개의 0~255 정수 옥텟이 아니면 InvalidAddress."""
    if not isinstance(ip, str):
        raise InvalidAddress(f"잘못된 IP 주소입니다: {ip!r}")
    parts = ip.strip().split(".")
    if len(parts) != 4 or not all(_OCTET.fullmatch(p) for p in parts):
        raise InvalidAddress(f"잘못된 IP 주소입니다: {ip!r}")

    value = 0
    for part in parts:
        octet = int(part)
        if octet > 255:
            raise InvalidAddress(f"잘못된 IP 주소입니다: {ip!r}")
        value = (value << 8) | octet
    return value


def int_to_ip(value: int) -> str:
    if not 0 <= value <= MAX_IPV4:
        raise InvalidAddress(f"IPv4 범위를 벗어난 값입니다: {value}")
    return ".".join(str((value >> shift) & 0xFF) for shift in (24, 16, 8, 0))


def normalize_ip(ip: str) -> str:
    """앞뒤 공백, 옥텟 앞의 0을 정리한 표준 표기."""
    return int_to_ip(ip_to_int(ip))


# =============================================================================
# 2. 대역
# =============================================================================
def range_size(start_ip: str, end_ip: str) -> int:
    start, end = ip_to_int(start_ip), ip_to_int(end_ip)
    if start > end:
        raise InvalidRange(f"시작 IP({start_ip})가 끝 IP({end_ip})보다 큽니다.")
    return end - start + 1


def validate_range(start_ip: str, end_ip: str, max_size: Optional[int] = None) -> int:
    """대역을 검증하고 주소 수를 반환합니다."""
    size = range_size(start_ip, end_ip)
    if max_size is not None and size > max_size:
        raise RangeTooLarge(f"IP 대역이 너무 큽니다: {size}개 (최대 {max_size}개)")
    return size


def enumerate_range(start_ip: str, end_ip: str, max_size: Optional[int] = None) -> List[str]:
    """start~end(양 끝 포함)의 모든 주소를 오름차순으로 반환합니다."""
    validate_range(start_ip, end_ip, max_size)
    start, end = ip_to_int(start_ip), ip_to_int(end_ip)
    return [int_to_ip(n) for n in range(start, end + 1)]


def contains(start_ip: str, end_ip: str, ip: str) -> bool:
    return ip_to_int(start_ip) <= ip_to_int(ip) <= ip_to_int(end_ip)


# =============================================================================
# 3. 할당 상태와 화면 행
# =============================================================================
def derive_status(department: Optional[str], user: Optional[str], usage: Optional[str]) -> IpStatus:
    if any((value or "").strip() for value in (department, user, usage)):
        return IpStatus.IN_USE
    return IpStatus.AVAILABLE


@dataclass
class DisplayRow:
    ip_address: str
    range_id: int
    department: str = ""
    user: str = ""
    usage: str = ""
    status: IpStatus = IpStatus.AVAILABLE
    detail_id: Optional[int] = None


def resolve_display_rows(ip_range: Any, details: Iterable[Any], max_size: Optional[int] = None) -> List[DisplayRow]:
    """
    대역의 주소마다 한 행을 만들고, 같은 (range_id, ip_address)의 상세 정보가 있으면 그 값을 사용합니다.
    상세 정보가 없는 주소는 빈 값과 사용가능 상태입니다.
    """
    index: Dict[Tuple[int, str], Any] = {(d.range_id, d.ip_address): d for d in details}

    rows = []
    for ip in enumerate_range(ip_range.start_ip, ip_range.end_ip, max_size):
        detail = index.get((ip_range.id, ip))
        if detail is None:
            rows.append(DisplayRow(ip_address=ip, range_id=ip_range.id))
            continue
        rows.append(DisplayRow(
            ip_address=ip,
            range_id=ip_range.id,
            department=detail.department or "",
            user=detail.user or "",
            usage=detail.usage or "",
            status=IpStatus(detail.status),
            detail_id=detail.id,
        ))
    return rows


# =============================================================================
# 4. 일괄 등록 계획
# =============================================================================
@dataclass
class Assignment:
    range_id: int
    ip_address: str
    department: str = ""
    user: str = ""
    usage: str = ""


def find_range_for(ip: str, ranges: Sequence[Any]) -> Optional[Any]:
    """주소를 포함하는 첫 번째 대역. 대역끼리 겹칠 수 있으므로 주어진 순서가 우선순위입니다."""
    value = ip_to_int(ip)
    for ip_range in ranges:
        if ip_to_int(ip_range.start_ip) <= value <= ip_to_int(ip_range.end_ip):
            return ip_range
    return None


def plan_bulk_assignment(rows: Iterable[Dict[str, Any]], ranges: Sequence[Any]) -> Tuple[List[Assignment], int]:
    """
    가져온 행들을 대역 배정 목록으로 바꿉니다.
    주소가 비어 있는 행은 버리고, 형식이 잘못되었거나 어느 대역에도 속하지 않는 행은 건너뜁니다.
    반환값은 (배정 목록, 건너뛴 행 수)입니다.
    """
    bounds = [(ip_to_int(r.start_ip), ip_to_int(r.end_ip), r) for r in ranges]

    assignments: List[Assignment] = []
    skipped = 0
    for row in rows:
        raw_ip = (row.get("ip_address") or "").strip()
        if not raw_ip:
            continue
        try:
            value = ip_to_int(raw_ip)
        except InvalidAddress:
            logger.debug("Skipping import row with malformed address %r", raw_ip)
            skipped += 1
            continue

        target = next((r for start, end, r in bounds if start <= value <= end), None)
        if target is None:
            logger.debug("Skipping import row %s: no containing range", raw_ip)
            skipped += 1
            continue

        assignments.append(Assignment(
            range_id=target.id,
            ip_address=int_to_ip(value),
            department=(row.get("department") or "").strip(),
            user=(row.get("user") or "").strip(),
            usage=(row.get("usage") or "").strip(),
        ))
    return assignments, skipped
