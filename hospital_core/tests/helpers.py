# hospital_core/tests/helpers.py

def scoped(hospital):
    return {"HTTP_X_HOSPITAL_ID": str(hospital.id)}
