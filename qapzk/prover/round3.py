"""
Round 3: 몫 다항식과 τ에서의 평가값
===================================

  h(x) = (A(x)·B(x) - C(x)) / Z(x)        (정확한 나눗셈, 나머지 0)

τ에서의 평가값:
  - 전체: A(τ), B(τ), C(τ), Z(τ), h(τ)
  - 비공개 기여분: A_priv(τ) = Σ_{i>ℓ} wᵢ·Aᵢ(τ)  (B, C도 동일)

Verifier는 공개 기여분 Σ_{i<=ℓ} wᵢ·Aᵢ(τ)를 직접 계산하고
A_priv(τ)를 더해 A(τ)를 복원한다.
"""


def execute(state):
    """Round 3을 실행한다.

    Raises:
        NonDivisible: 나머지가 0이 아닐 때

    결과 (state에 기록):
        state.h_poly, state.proof.{a,b,c}_priv, {a,b,c,h,z}_eval
    """
    field = state.field
    tau = state.tau
    num_public = state.r1cs.num_public

    state.h_poly = state.qap.quotient(state.witness)

    a_priv = field(0)
    b_priv = field(0)
    c_priv = field(0)
    columns = state.qap.evaluate_columns(tau)
    for i in range(num_public + 1, len(state.witness)):
        w = state.witness[i]
        a_i, b_i, c_i = columns[i]
        a_priv = a_priv + w * a_i
        b_priv = b_priv + w * b_i
        c_priv = c_priv + w * c_i

    a_pub, b_pub, c_pub = state.verifying_key.public_evaluations(
        tau, state.witness[1:num_public + 1]
    )

    proof = state.proof
    proof.a_priv = a_priv
    proof.b_priv = b_priv
    proof.c_priv = c_priv
    proof.a_eval = a_pub + a_priv
    proof.b_eval = b_pub + b_priv
    proof.c_eval = c_pub + c_priv
    proof.h_eval = state.h_poly.evaluate(tau)
    proof.z_eval = state.qap.Z.evaluate(tau)
