"""
산술 회로 표현 (Circuit Representation)
========================================

계산을 게이트의 아레나(arena)로 기술하고 R1CS로 컴파일한다.

**게이트 종류** (태그된 변형, 인덱스로 참조):
  | 종류      | 인자       | 의미                    |
  |-----------|------------|-------------------------|
  | INPUT     | -          | 입력 변수 (공개/비공개) |
  | CONSTANT  | -          | 상수 값                 |
  | ADD       | (a, b)     | a + b                   |
  | MUL       | (a, b)     | a · b                   |

  게이트는 자신보다 앞선 게이트만 참조하므로 아레나 순서가 곧
  위상 정렬이다. 공유 부분식은 같은 인덱스를 여러 번 참조하면 된다.

**R1CS 컴파일 규칙**:
  - ADD, CONSTANT: 선형 결합(linear combination)으로 접힘 → 제약 없음
  - MUL: 한쪽이 상수면 스칼라배로 접힘, 아니면 새 변수 + 제약 1개
  - output(): 공개 출력. MUL 결과면 그 변수가 곧 공개 슬롯이 되고,
    아니면 (lc)·1 = out 제약이 추가된다
  - assert_equal(): (lc)·1 = 상수 제약

**위트니스 레이아웃**:
  [1, 공개 입력..., 공개 출력..., 비공개 입력..., 중간 곱셈값...]

**예제 회로**: x³ + x + 5 = 35 (x = 3)
  | 변수   | 값 | 출처                 |
  |--------|----|----------------------|
  | one    | 1  | 상수                 |
  | out    | 35 | 공개 출력            |
  | x      | 3  | 비공개 입력          |
  | x²     | 9  | x · x                |
  | x³     | 27 | x² · x               |
  제약: x·x = x²,  x²·x = x³,  (x³ + x + 5)·1 = out

사용 예시:
    >>> circuit = Circuit.cubic_eq_35()
    >>> r1cs = circuit.to_r1cs()
    >>> witness = circuit.compute_witness({"x": 3})
"""

import enum

from qapzk.errors import ConstraintShapeError
from qapzk.field import FR, to_field
from qapzk.r1cs import R1CS


class GateKind(enum.Enum):
    INPUT = "input"
    CONSTANT = "constant"
    ADD = "add"
    MUL = "mul"


class Gate:
    """아레나의 한 노드.

    속성:
        kind: GateKind
        args: 피연산자 게이트 인덱스 튜플 (ADD, MUL)
        name: 입력 이름 (INPUT)
        value: 상수 값 (CONSTANT)
        public: 공개 입력 여부 (INPUT)
    """

    def __init__(self, kind, args=(), name=None, value=None, public=False):
        self.kind = kind
        self.args = tuple(args)
        self.name = name
        self.value = value
        self.public = public

    def __repr__(self):
        if self.kind is GateKind.INPUT:
            return f"Gate(input {self.name!r}{' public' if self.public else ''})"
        if self.kind is GateKind.CONSTANT:
            return f"Gate(constant {int(self.value)})"
        return f"Gate({self.kind.value} {self.args[0]}, {self.args[1]})"


def _lc_add(x, y):
    out = dict(x)
    for slot, coeff in y.items():
        total = out[slot] + coeff if slot in out else coeff
        if total.n == 0:
            out.pop(slot, None)
        else:
            out[slot] = total
    return out


def _lc_scale(x, scalar):
    if scalar.n == 0:
        return {}
    return {slot: coeff * scalar for slot, coeff in x.items()}


def _lc_constant(x, field):
    """상수만 있는 선형 결합이면 그 상수, 아니면 None."""
    if set(x) - {0}:
        return None
    return x.get(0, field(0))


def _lc_to_row(x, width, field):
    row = [field(0)] * width
    for slot, coeff in x.items():
        row[slot] = coeff
    return row


class Circuit:
    """산술 회로 빌더.

    속성:
        field: 필드 클래스
        gates: Gate 아레나 (인덱스 = 노드 id)
        outputs: (노드 id, 이름) 공개 출력 리스트
        assertions: (노드 id, 상수) 리스트
    """

    def __init__(self, field=FR):
        self.field = field
        self.gates = []
        self.outputs = []
        self.assertions = []
        self._compiled = None

    def _push(self, gate):
        for arg in gate.args:
            if not 0 <= arg < len(self.gates):
                raise ConstraintShapeError(f"gate refers to unknown node {arg}")
        self.gates.append(gate)
        self._compiled = None
        return len(self.gates) - 1

    # ─── 게이트 추가 ───

    def input(self, name, public=False):
        """입력 변수를 추가한다. 반환값은 노드 id."""
        if any(g.kind is GateKind.INPUT and g.name == name for g in self.gates):
            raise ConstraintShapeError(f"duplicate input name {name!r}")
        return self._push(Gate(GateKind.INPUT, name=name, public=public))

    def constant(self, value):
        return self._push(Gate(GateKind.CONSTANT, value=to_field(value, self.field)))

    def add(self, a, b):
        return self._push(Gate(GateKind.ADD, (a, b)))

    def mul(self, a, b):
        return self._push(Gate(GateKind.MUL, (a, b)))

    def neg(self, a):
        return self.mul(self.constant(-1), a)

    def sub(self, a, b):
        return self.add(a, self.neg(b))

    def output(self, node, name):
        """node의 값을 공개 출력으로 노출한다."""
        if not 0 <= node < len(self.gates):
            raise ConstraintShapeError(f"unknown node {node}")
        self.outputs.append((node, name))
        self._compiled = None

    def assert_equal(self, node, value):
        """node의 값이 상수 value와 같아야 한다는 제약을 추가한다."""
        if not 0 <= node < len(self.gates):
            raise ConstraintShapeError(f"unknown node {node}")
        self.assertions.append((node, to_field(value, self.field)))
        self._compiled = None

    # ─── 컴파일 ───

    @property
    def public_names(self):
        """공개 슬롯 1..ℓ의 이름 (공개 입력, 공개 출력 순)."""
        inputs = [g.name for g in self.gates if g.kind is GateKind.INPUT and g.public]
        return inputs + [name for _, name in self.outputs]

    def _compile(self):
        if self._compiled is not None:
            return self._compiled
        field = self.field

        # 슬롯 배치: one, 공개 입력, 공개 출력, 비공개 입력, 곱셈 변수
        slot_nodes = [None]
        input_slot = {}
        for i, g in enumerate(self.gates):
            if g.kind is GateKind.INPUT and g.public:
                input_slot[i] = len(slot_nodes)
                slot_nodes.append(i)
        num_public = len(slot_nodes) - 1 + len(self.outputs)

        output_slots = []
        mul_target = {}
        for node, _ in self.outputs:
            slot = len(slot_nodes)
            slot_nodes.append(node)
            output_slots.append(slot)
            if self.gates[node].kind is GateKind.MUL and node not in mul_target:
                mul_target[node] = slot

        for i, g in enumerate(self.gates):
            if g.kind is GateKind.INPUT and not g.public:
                input_slot[i] = len(slot_nodes)
                slot_nodes.append(i)

        lcs = []
        rows = []
        for i, g in enumerate(self.gates):
            if g.kind is GateKind.INPUT:
                lc = {input_slot[i]: field(1)}
            elif g.kind is GateKind.CONSTANT:
                lc = {0: g.value} if g.value.n else {}
            elif g.kind is GateKind.ADD:
                lc = _lc_add(lcs[g.args[0]], lcs[g.args[1]])
            else:
                left, right = lcs[g.args[0]], lcs[g.args[1]]
                c_left = _lc_constant(left, field)
                c_right = _lc_constant(right, field)
                if c_left is not None:
                    lc = _lc_scale(right, c_left)
                elif c_right is not None:
                    lc = _lc_scale(left, c_right)
                else:
                    if i in mul_target:
                        slot = mul_target[i]
                    else:
                        slot = len(slot_nodes)
                        slot_nodes.append(i)
                    rows.append((left, right, {slot: field(1)}))
                    lc = {slot: field(1)}
            lcs.append(lc)

        one = {0: field(1)}
        for (node, _), slot in zip(self.outputs, output_slots):
            if lcs[node] != {slot: field(1)}:
                rows.append((lcs[node], one, {slot: field(1)}))
        for node, value in self.assertions:
            rows.append((lcs[node], one, {0: value} if value.n else {}))

        if not rows:
            raise ConstraintShapeError("circuit compiles to zero constraints")

        width = len(slot_nodes)
        constraints = [
            tuple(_lc_to_row(x, width, field) for x in row) for row in rows
        ]
        r1cs = R1CS(width, num_public, constraints, field=field)
        self._compiled = (r1cs, slot_nodes)
        return self._compiled

    def to_r1cs(self):
        """회로를 R1CS로 컴파일한다.

        Raises:
            ConstraintShapeError: 제약이 하나도 생기지 않는 회로
        """
        return self._compile()[0]

    # ─── 위트니스 계산 ───

    def evaluate(self, assignments):
        """입력 할당으로 모든 노드의 값을 계산한다.

        Raises:
            ConstraintShapeError: 할당되지 않은 입력이 있을 때
        """
        field = self.field
        values = []
        for g in self.gates:
            if g.kind is GateKind.INPUT:
                if g.name not in assignments:
                    raise ConstraintShapeError(f"missing assignment for input {g.name!r}")
                values.append(to_field(assignments[g.name], field))
            elif g.kind is GateKind.CONSTANT:
                values.append(g.value)
            elif g.kind is GateKind.ADD:
                values.append(values[g.args[0]] + values[g.args[1]])
            else:
                values.append(values[g.args[0]] * values[g.args[1]])
        return values

    def compute_witness(self, assignments):
        """입력 할당(이름 → 값)에서 위트니스 벡터를 계산한다.

        Returns:
            list: 필드 원소 위트니스 [1, 공개..., 비공개...]
        """
        _, slot_nodes = self._compile()
        values = self.evaluate(assignments)
        return [self.field(1)] + [values[node] for node in slot_nodes[1:]]

    # ─── 예제 회로 ───

    @staticmethod
    def square_eq(field=FR):
        """예제 회로: x · x = y  (x 비공개, y 공개 출력).

        위트니스 레이아웃: [1, y, x]
        x = 3이면 y = 9.
        """
        circuit = Circuit(field)
        x = circuit.input("x")
        circuit.output(circuit.mul(x, x), "y")
        return circuit

    @staticmethod
    def cubic_eq_35(field=FR):
        """예제 회로: x³ + x + 5 = out  (x 비공개, out 공개 출력).

        x = 3이면 out = 35.
        위트니스 레이아웃: [1, out, x, x², x³]
        """
        circuit = Circuit(field)
        x = circuit.input("x")
        x2 = circuit.mul(x, x)
        x3 = circuit.mul(x2, x)
        total = circuit.add(circuit.add(x3, x), circuit.constant(5))
        circuit.output(total, "out")
        return circuit
